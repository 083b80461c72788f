from .token import Token
from .marking import Marking
from .petri_net import PetriNet, Place, Transition, Flow, Node

__all__ = ["Token", "Marking", "PetriNet", "Place", "Transition", "Flow", "Node"]
