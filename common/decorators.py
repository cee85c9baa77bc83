import inspect
from typing import Any, get_type_hints

from pydantic import create_model

from common.models import BaseCommand


def Command(func: Any) -> BaseCommand:
    """Decorator to expose a function as a named command on the transport.

    The function signature becomes a pydantic parameter model, so payloads
    arriving from the transport are validated before the call and the JSON
    schema of the parameters can be published to callers.
    """
    signature = inspect.signature(func)
    type_hints = get_type_hints(func)

    fields: dict[str, Any] = {}
    for name, param in signature.parameters.items():
        if name == "self":
            continue

        annotation = type_hints.get(name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[name] = (annotation, default)

    params_model = create_model(f"{func.__name__}_params", **fields)
    params_schema = params_model.model_json_schema()
    params_schema.pop("title", None)

    return BaseCommand(
        command_name=func.__name__,
        description=inspect.getdoc(func) or "No description provided.",
        command_params=params_schema,
        params_model=params_model,
        func=func,
    )
