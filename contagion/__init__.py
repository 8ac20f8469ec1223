from .disease import DiseaseModel, Infected, ModelContext, NothingChanged, SIRDiseaseModel
from .entities import Citizen, CitizenId, InfectionState, Location, LocationId, LocationType, Sex
from .movers import PeopleMover, ScheduleBasedPeopleMover
from .ranges import HalfOpenRange, PartPer10K, per_10k, per_1k, percent
from .schedule import Schedule, ScheduleBuilder, TimeRange, stay_at_home, work_9_to_5
from .simulation import Simulation
from .state import CitizenState, Infection, Tick
