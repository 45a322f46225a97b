"""
Validation utilities for vfpipe.

This module converts pydantic validation failures into the domain
ValidationError and normalizes user-entered component paths.
"""

import re
import unicodedata
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..utils.logger import logger

M = TypeVar("M", bound=BaseModel)

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_DASHES = re.compile(r"[\s_-]+")


def validate_model(model_class: type[M], data: Any) -> M:
    """
    Validate data against a pydantic model.

    Args:
        model_class: The model to validate against
        data: Mapping (or model instance) to validate

    Returns:
        The validated model instance

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    try:
        return model_class.model_validate(data)
    except PydanticValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'value'}: {err['msg']}"
            for err in e.errors()
        )
        logger.error(f"{model_class.__name__} validation error: {messages}")
        raise ValidationError(f"Invalid {model_class.__name__}: {messages}") from e


def slugify(text: str) -> str:
    """
    Turn free text into a storage-safe slug.

    ``"001 Load Data!"`` becomes ``"001-load-data"``.

    Args:
        text: Text to convert

    Returns:
        Lowercase slug of word characters separated by single dashes
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = _SLUG_STRIP.sub("", text.lower()).strip()
    return _SLUG_DASHES.sub("-", text).strip("-")
