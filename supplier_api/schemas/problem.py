from pydantic import BaseModel


class ValidationProblem(BaseModel):
    type: str = "https://tools.ietf.org/html/rfc9110#section-15.5.1"
    title: str = "One or more validation errors occurred."
    status: int = 400
    errors: dict[str, list[str]]


class IdentityErrorRead(BaseModel):
    code: str
    description: str
