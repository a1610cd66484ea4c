from xingine.data.sample_actions import FORM_SAMPLES, SAMPLE_ACTIONS
from xingine.scripts.run_sample import build_context


async def test_counter_setup(engine):
    context = build_context()
    result = await engine.run(SAMPLE_ACTIONS["counter_setup"], context)

    assert result.success
    assert context.global_context.state["count"] == 1
    assert context.global_context.state["flag"] is True


async def test_profile_load(engine):
    context = build_context()
    result = await engine.run(SAMPLE_ACTIONS["profile_load"], context)

    assert result.result == {"name": "Ada Lovelace", "email": "ada@example.com"}
    assert context.global_context.state["userName"] == "Ada Lovelace"
    assert context.global_context.state["userEmail"] == "ada@example.com"
    assert context.global_context.toasts == []


async def test_adult_gate(engine):
    result = await engine.run(SAMPLE_ACTIONS["adult_gate"], build_context())
    assert result.result is True


async def test_login_form_submit(engine):
    context = build_context(with_form=True)
    result = await engine.run(SAMPLE_ACTIONS["login_form_submit"], context)

    assert result.result == {"isValid": True}
    assert context.form_context.submissions[0]["events"] == {"events": ["login"]}


def test_every_form_sample_is_known():
    assert FORM_SAMPLES <= set(SAMPLE_ACTIONS)
