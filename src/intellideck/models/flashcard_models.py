from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class Card(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    term: str
    definition: str
    is_starred: bool = Field(default=False, alias="isStarred")


class StudySet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str
    cards: List[Card]

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("topic must be a non-empty string")
        return value

    @field_validator("cards")
    @classmethod
    def card_ids_unique(cls, value: List[Card]) -> List[Card]:
        ids = [c.id for c in value]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate card ids: {', '.join(duplicates)}")
        return value


class CardDraft(BaseModel):
    """A card row as typed into the create-set form, possibly blank"""
    term: str = ""
    definition: str = ""

    def is_complete(self) -> bool:
        return bool(self.term.strip() and self.definition.strip())


# Structured outputs for the generation agents

class GeneratedCard(BaseModel):
    term: str = Field(description="The vocabulary word or concept. Should be specific and relevant.")
    definition: str = Field(description="The definition or explanation of the term. Should be clear and concise.")


class GeneratedCardSet(BaseModel):
    flashcards: List[GeneratedCard] = Field(
        description="An array of flashcard objects extracted from the provided text."
    )


class DistractorOptions(BaseModel):
    options: List[str] = Field(description="An array of three incorrect multiple-choice options.")


class CreateSetRequest(BaseModel):
    title: str
    cards: List[CardDraft]
    generated: Optional[List[GeneratedCard]] = None
