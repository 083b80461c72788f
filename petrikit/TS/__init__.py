from .transition_system import TransitionSystem, State, Arc

__all__ = ["TransitionSystem", "State", "Arc"]
