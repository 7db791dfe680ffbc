from .executor import TestExecutor
from .step_definitions import StepDefinitionRegistry, given, when, then
from .world import World, ScenarioPhase, ScenarioState
from .hooks import BrowserSession, SessionState
from .report_collector import ReportCollector

__all__ = [
    'TestExecutor',
    'StepDefinitionRegistry',
    'World',
    'ScenarioPhase',
    'ScenarioState',
    'BrowserSession',
    'SessionState',
    'ReportCollector',
    'given',
    'when',
    'then'
]
