"""Post Schemas — Pydantic models for the posts API boundary and the field rules.

Invariants:
    - PostRules is the single declaration of field rules (title min 3, all required)
    - validate_post_fields() is pure: same input, same violations, no IO, no state
    - PostBody accepts any shape-correct body; rule checks happen in the service layer
    - PostResponse is the only shape a post leaves the API in

Design Decisions:
    - Declarative Field constraints over hand-written checks (ADR: same rules, one place)
    - PostBody fields default to "": a missing field reaches the validator and is
      reported as "required" instead of a transport-level 400
    - Rule names follow the validator tag vocabulary ("required", "min=3")
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.domain_types import Post, PostFields
from app.core.errors import FieldViolation


class PostRules(BaseModel):
    """Field rules every persisted post satisfies."""
    title: str = Field(min_length=3)
    content: str = Field(min_length=1)
    author: str = Field(min_length=1)


def _rule_name(error: dict, value: object) -> str:
    if error["type"] == "missing" or value == "":
        return "required"
    if error["type"] == "string_too_short":
        return f"min={error['ctx']['min_length']}"
    return error["type"]


def validate_post_fields(fields: PostFields) -> list[FieldViolation]:
    """Check fields against PostRules. Returns [] when valid."""
    data = fields.as_dict()
    try:
        PostRules.model_validate(data)
    except ValidationError as e:
        return [
            FieldViolation(
                field=str(err["loc"][0]),
                rule=_rule_name(err, data.get(str(err["loc"][0]))),
            )
            for err in e.errors()
        ]
    return []


class PostBody(BaseModel):
    """Body of POST/PUT: full post content, id ignored if sent."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    content: str = ""
    author: str = ""

    def to_fields(self) -> PostFields:
        return PostFields(title=self.title, content=self.content, author=self.author)


class PostResponse(BaseModel):
    """Public-facing post data."""
    id: str
    title: str
    content: str
    author: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(**post.as_dict())
