"""Generation options.

A single Options value is built per run and handed to every helper; field
names accept both snake_case and the camelCase spelling used in config files:

    Options.model_validate({"namespace": "API", "passthroughCustomScalars": True})
"""

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .naming import PYTHON_KEYWORDS


class Options(BaseModel):
    """Options recognized by the code generator."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    namespace: str | None = None
    passthrough_custom_scalars: bool = False
    custom_scalars_prefix: str = ""
    generate_operation_ids: bool = False
    add_typename: bool = True
    runtime_module: str = "gql_opgen.runtime"
    template_dir: str | None = None

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.isidentifier() or value in PYTHON_KEYWORDS:
            raise ValueError(f"namespace must be a Python identifier, got {value!r}")
        return value

    @field_validator("custom_scalars_prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if value and not value.isidentifier():
            raise ValueError(f"custom scalars prefix must be an identifier prefix, got {value!r}")
        return value
