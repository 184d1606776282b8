from .temporal import (
    ActionType, InteractionRequest, TemporalControlState, PlaybackControl
)

__all__ = [
    'ActionType', 'InteractionRequest', 'TemporalControlState', 'PlaybackControl',
]
