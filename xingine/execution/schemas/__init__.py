from xingine.execution.schemas.dispatch import DispatchTarget, RegistryKind

__all__ = [
    "DispatchTarget",
    "RegistryKind",
]
