from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Runway:
    """
    Data class for storing runway information.

    A runway belongs to one airport and has two ends: the low end (le_*)
    and the high end (he_*). Within an airport it is identified by the
    composite key "<le_ident>/<he_ident>".
    """

    airport: str  # advisory reference to Airport.code
    length: int = 0  # feet
    width: int = 0  # feet
    surface: str = ""
    lighted: bool = False
    closed: bool = False

    # Low end (LE) information
    le_ident: str = ""
    le_latitude: float = 0.0
    le_longitude: float = 0.0
    le_elevation: int = 0
    le_heading: int = 0
    le_displaced_threshold: int = 0

    # High end (HE) information
    he_ident: str = ""
    he_latitude: float = 0.0
    he_longitude: float = 0.0
    he_elevation: int = 0
    he_heading: int = 0
    he_displaced_threshold: int = 0

    @property
    def key(self) -> str:
        """Composite key of this runway inside its airport bucket."""
        return f"{self.le_ident}/{self.he_ident}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Runway':
        """Create instance from dictionary, ignoring unknown keys."""
        known_fields = {field for field in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known_fields})

    def __repr__(self):
        return f"Runway(airport='{self.airport}', le_ident='{self.le_ident}', he_ident='{self.he_ident}')"

    def __str__(self):
        """Return a human-readable string representation of the runway."""
        status = []
        if self.closed:
            status.append("CLOSED")
        if self.lighted:
            status.append("LIGHTED")

        runway_info = f"Runway {self.key}"
        if status:
            runway_info += f" ({', '.join(status)})"

        if self.length:
            runway_info += f"\nLength: {self.length}ft"
        if self.width:
            runway_info += f" Width: {self.width}ft"
        if self.surface:
            runway_info += f"\nSurface: {self.surface}"

        return runway_info
