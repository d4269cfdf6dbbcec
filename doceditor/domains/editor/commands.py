"""Закрытый набор команд форматирования, которые принимает поверхность ввода"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator


class ToggleMark(BaseModel):
    kind: Literal["toggle_mark"] = "toggle_mark"
    mark: Literal["bold", "italic", "underline", "code", "strike"]


class SetBlock(BaseModel):
    kind: Literal["set_block"] = "set_block"
    block: Literal["paragraph", "heading", "quote", "code", "bullet_list", "ordered_list"]
    level: Optional[int] = Field(None, ge=1, le=6)

    @model_validator(mode="after")
    def check_level(self) -> "SetBlock":
        if self.block == "heading" and self.level is None:
            raise ValueError("Heading block requires a level")
        if self.block != "heading" and self.level is not None:
            raise ValueError("Only heading blocks take a level")
        return self


class SetAlignment(BaseModel):
    kind: Literal["set_alignment"] = "set_alignment"
    align: Literal["left", "center", "right"]


class History(BaseModel):
    kind: Literal["history"] = "history"
    action: Literal["undo", "redo"]


FormattingCommand = Annotated[
    Union[ToggleMark, SetBlock, SetAlignment, History],
    Field(discriminator="kind"),
]

command_adapter = TypeAdapter(FormattingCommand)


def parse_command(data: dict) -> FormattingCommand:
    return command_adapter.validate_python(data)
