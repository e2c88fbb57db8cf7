"""
SF-50 Assistant - Nature of Action recommendations for federal personnel actions

A small system that:
- Prompts a language model with a described employment scenario
- Parses the free-text reply into a structured recommendation
- Refines it through a bounded clarification dialogue
"""

__version__ = '0.1.0'

from sf50.core.controller import DialogueController, DialogueCursor, DialogueState, TurnResult
from sf50.core.config import SF50Config, get_config, set_config
from sf50.core.errors import EmptyModelOutputError, ModelInvocationError, SF50Error
from sf50.parsing.recommendation_parser import Recommendation, parse_noa_response

__all__ = [
    'DialogueController',
    'DialogueCursor',
    'DialogueState',
    'TurnResult',
    'SF50Config',
    'get_config',
    'set_config',
    'SF50Error',
    'EmptyModelOutputError',
    'ModelInvocationError',
    'Recommendation',
    'parse_noa_response',
]
