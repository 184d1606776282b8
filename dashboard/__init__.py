"""
Dashboard Presentation Layer

Responsibility:
Turn user intents into engine calls and engine output into renderable
views. Drawing, map projection and physics integration stay with the
host's collaborators.

PRINCIPLES:
1. Views are immutable (frozen)
2. No graph computation here, the engine owns it
3. ViewState changes go through the ViewStateMachine only
"""
