from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, StrictStr, ValidationError

from bun_docs_mcp.error_handling.exceptions import InvalidParamsError

DOCS_RESOURCE_URI = "bun://docs"
DOCS_QUERY_PREFIX = f"{DOCS_RESOURCE_URI}?query="


# Parameter models per method

class ResourcesReadParams(BaseModel):
    uri: StrictStr


# Method name -> parameter model
METHOD_PARAMS_MAP: Dict[str, Type[BaseModel]] = {
    "resources/read": ResourcesReadParams,
}


def validate_request_params(method: str, params: Optional[Any]) -> BaseModel:
    """
    Validate the params of a JSON-RPC request with Pydantic.

    Args:
        method: The JSON-RPC method name.
        params: The received params (may be None).

    Returns:
        The validated parameter model.

    Raises:
        InvalidParamsError: If params are missing or a field is missing or mistyped.
        KeyError: If the method has no validation model.
    """
    model_class = METHOD_PARAMS_MAP[method]
    if params is None:
        raise InvalidParamsError("Missing params")
    if not isinstance(params, dict):
        raise InvalidParamsError("Params must be an object")
    try:
        return model_class.model_validate(params)
    except ValidationError as e:
        field = e.errors()[0]["loc"][0]
        raise InvalidParamsError(f"Missing or invalid {field} parameter", original_exception=e)


def parse_bun_docs_uri(uri: str) -> str:
    """
    Extract the search query from a docs resource URI.

    ``bun://docs`` yields an empty query; ``bun://docs?query=<value>`` yields
    ``<value>`` exactly as written (no percent-decoding).

    Raises:
        InvalidParamsError: For any other URI shape.
    """
    if uri.startswith(DOCS_QUERY_PREFIX):
        return uri[len(DOCS_QUERY_PREFIX):]
    if uri == DOCS_RESOURCE_URI:
        return ""
    raise InvalidParamsError(f"Invalid URI format: {uri}")
