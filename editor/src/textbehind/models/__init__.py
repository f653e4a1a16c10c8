"""Scene data model"""
from textbehind.models.transform import Vec2, DrawRect
from textbehind.models.text_layer import TextLayer
from textbehind.models.scene import Scene
from textbehind.models.drag_session import DragSession

__all__ = ['Vec2', 'DrawRect', 'TextLayer', 'Scene', 'DragSession']
