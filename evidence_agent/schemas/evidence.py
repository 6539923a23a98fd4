"""Evidence schemas: routes, the three evidence variants, and their union."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Route(str, Enum):
    """A source category the router can select for a question."""

    SQL = "SQL"
    DOCS = "DOCS"
    WEB = "WEB"


ROUTE_ORDER: tuple[Route, ...] = (Route.SQL, Route.DOCS, Route.WEB)

DOCS_CITATION = "docs:local"
WEB_FALLBACK_CITATION = "internet"


def sql_citation(container: str) -> str:
    return f"sqlite:{container}"


class SqlEvidence(BaseModel):
    """Rows read from one relation of a structured-data container, or the error that prevented it.

    relation is None only when the whole container could not be opened or enumerated.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["SQL"] = "SQL"
    container: str
    relation: str | None = None
    rows: list[dict[str, Any]] | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _rows_xor_error(self) -> "SqlEvidence":
        if (self.rows is None) == (self.error is None):
            raise ValueError("SqlEvidence needs exactly one of rows or error")
        return self


class DocsEvidence(BaseModel):
    """Top-k snippets from the internal document index (may be empty)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["DOCS"] = "DOCS"
    snippets: list[str] = Field(default_factory=list)


class WebEvidence(BaseModel):
    """Aggregated web text plus the provider display names that contributed to it."""

    model_config = ConfigDict(frozen=True)

    type: Literal["WEB"] = "WEB"
    text: str
    provider_names: list[str] = Field(default_factory=list)


Evidence = Annotated[Union[SqlEvidence, DocsEvidence, WebEvidence], Field(discriminator="type")]
