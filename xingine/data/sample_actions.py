from xingine.domain.models import ActionNode, ConditionalChain, BaseFilterCondition, GroupCondition

# ==============================================================================
# SAMPLE ACTION TREES
# ==============================================================================

# --- COUNTER: set a value, then flip a flag regardless of the outcome ---
counter_setup = ActionNode(
    action="setState",
    args={"key": "count", "value": 1},
    then=[ActionNode(action="toggleState", args={"key": "flag"})],
)

# --- PROFILE LOAD: fetch a user, copy fields from the result, branch on failure ---
profile_load = ActionNode(
    action="makeApiCall",
    args={"url": "users/:userId", "method": "GET"},
    chains=[
        ConditionalChain(
            condition=BaseFilterCondition(field="__success", operator="eq", value=True),
            action=[
                ActionNode(action="setState", args={"key": "GLOBAL.userName", "value": "__result.name"}),
                ActionNode(action="setState", args={"key": "GLOBAL.userEmail", "value": "__result.email"}),
            ],
        ),
        ConditionalChain(
            condition=BaseFilterCondition(field="__hasError", operator="eq", value=True),
            action=[
                ActionNode(action="error"),
                ActionNode(action="showToast", args={"message": "Could not load the profile", "type": "error"}),
            ],
        ),
    ],
    then=["stopHighFrequencyTest"],
)

# --- ADULT GATE: show a section only for adult, verified users ---
adult_gate_condition = GroupCondition(
    all_of=[
        BaseFilterCondition(field="user.age", operator="gte", value=18),
        BaseFilterCondition(field="user.verified", operator="eq", value=True),
    ]
)

adult_gate = ActionNode(action="showHide", args={"condition": adult_gate_condition.model_dump(by_alias=True, exclude_none=True)})

# --- LOGIN FORM: validate, then submit only when valid ---
login_form_submit = ActionNode(
    action="validateForm",
    chains=[
        ConditionalChain(
            condition=BaseFilterCondition(field="__result.isValid", operator="eq", value=True),
            action=[ActionNode(action="submitForm", args={"events": ["login"]})],
        ),
        ConditionalChain(
            condition=BaseFilterCondition(field="__result.isValid", operator="eq", value=False),
            action=[ActionNode(action="showToast", args={"message": "Please fix the highlighted fields", "type": "warning"})],
        ),
    ],
)


SAMPLE_ACTIONS = {
    "counter_setup": counter_setup,
    "profile_load": profile_load,
    "adult_gate": adult_gate,
    "login_form_submit": login_form_submit,
}

# Samples that need a form collaborator to run
FORM_SAMPLES = {"login_form_submit"}
