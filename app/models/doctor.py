from sqlmodel import Field, SQLModel


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)
    full_name: str
    specialty: str | None = None
