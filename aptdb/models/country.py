from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Country:
    """ISO country as published by OurAirports."""

    code: str
    name: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Country':
        known_fields = {field for field in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known_fields})
