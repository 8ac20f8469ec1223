"""
This module contains the citizens and locations which make up a simulated population.
"""


class Sex:
    MALE = "male"
    FEMALE = "female"


class LocationType:
    HOME = "home"
    WORK = "work"
    PUBLIC = "public"


class InfectionState:
    SUSCEPTIBLE = "susceptible"
    INFECTED = "infected"
    RECOVERED = "recovered"

    ALL = (SUSCEPTIBLE, INFECTED, RECOVERED)


class _Id:
    """
    An opaque, string-backed identifier.
    """

    def __init__(self, id: str):
        assert type(id) is str, "Id must be a string, not %s." % type(id)
        self.id = id

    def __eq__(self, obj):
        return type(obj) is type(self) and obj.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id!r})"


class CitizenId(_Id):
    pass


class LocationId(_Id):
    pass


class Citizen:
    """
    A simulated person.
    Citizens are compared by their id.

    Args:
        id: The citizen's unique id.
        age: The citizen's age in years.
        sex: The citizen's sex, one of ``Sex``.

    """

    def __init__(self, id: CitizenId, age: int, sex: str):
        self.id = id
        self.age = age
        self.sex = sex

    def __eq__(self, obj):
        return isinstance(obj, Citizen) and obj.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self) -> str:
        return self.id.id

    def __repr__(self) -> str:
        return f"<Citizen {self.id.id}>"


class Location:
    """
    A place which citizens can occupy.
    Locations are compared by their id.
    """

    def __init__(self, id: LocationId, type: str = LocationType.HOME):
        self.id = id
        self.type = type

    def __eq__(self, obj):
        return isinstance(obj, Location) and obj.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self) -> str:
        return f"{self.id.id} ({self.type})"

    def __repr__(self) -> str:
        return f"<Location {self}>"
