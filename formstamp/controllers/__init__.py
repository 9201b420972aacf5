"""
Controllers driving the markup engine from user input.
"""
from .gesture_controller import GestureController, GestureMode, GestureSession
from .interaction_controller import (
    ConfigurationProvider,
    ConfigurationRequest,
    ConfigurationResult,
    InteractionController,
    InteractionPhase,
)

__all__ = [
    'GestureController',
    'GestureMode',
    'GestureSession',
    'ConfigurationProvider',
    'ConfigurationRequest',
    'ConfigurationResult',
    'InteractionController',
    'InteractionPhase',
]
