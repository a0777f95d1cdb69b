from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Airport:
    """Data class for storing airport information."""

    code: str  # OurAirports ident, usually the ICAO code
    name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: int = 0  # feet
    city: str = ""
    region: str = ""  # advisory reference to Region.code
    country: str = ""  # advisory reference to Country.code
    continent: str = ""
    iata: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Airport':
        """Create instance from dictionary, ignoring unknown keys."""
        known_fields = {field for field in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known_fields})

    def __str__(self):
        """Return a human-readable string representation of the airport."""
        info = f"{self.code} {self.name}"
        if self.iata:
            info += f" ({self.iata})"
        if self.city:
            info += f"\n{self.city}, {self.country}"
        return info
