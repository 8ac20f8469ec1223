from .base import SimulationListener
from .counts import StateCountListener
from .tracing import TracingListener
from .tracking import GraphStyle, InfectionRecord, InfectionTrackingListener
