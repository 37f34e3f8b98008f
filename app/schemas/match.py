from pydantic import BaseModel, Field, field_validator


class MatchRequest(BaseModel):
    project_id: str = Field(..., min_length=1)

    @field_validator("project_id", mode="before")
    @classmethod
    def coerce_numeric_id(cls, value):
        # JSON numbers are accepted as ids; booleans are not
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class MatchAccepted(BaseModel):
    message: str = "Matching started"
