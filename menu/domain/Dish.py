"""Dish domain entity: name (English / Burmese), description, tags, image and price."""
from typing import List, Optional


class Dish:
    def __init__(self, id: str = "", name: str = "", name_my: Optional[str] = None,
                 description: Optional[str] = None, description_my: Optional[str] = None,
                 tags: Optional[List[str]] = None, image_url: Optional[str] = None,
                 price_cents: Optional[int] = None):
        self.id = id
        self.name = name
        self.name_my = name_my
        self.description = description
        self.description_my = description_my
        self.tags = tags[:] if tags else []
        self.image_url = image_url
        self.price_cents = price_cents

    def __str__(self) -> str:
        price = f"{self.price_cents / 100:.2f}" if self.price_cents is not None else "-"
        return f"{self.name} ({self.id}) - Price: {price}"

    __repr__ = __str__

    def __eq__(self, other):
        if not isinstance(other, Dish):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def from_dict(data):
        '''Creates a Dish from a dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "name", "name_my", "description", "description_my", "tags", "image_url", "price_cents"}
        return Dish(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "name_my": self.name_my,
            "description": self.description,
            "description_my": self.description_my,
            "tags": self.tags,
            "image_url": self.image_url,
            "price_cents": self.price_cents,
        }
