import re
import inspect
from typing import Dict, List, Callable, Pattern, Optional, Any, Tuple, Union
from dataclasses import dataclass, field
import logging

from ..core.exceptions import ExecutionError

logger = logging.getLogger(__name__)

# Placeholder -> (regex, converter), cucumber-expression style
PARAMETER_TYPES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    'string': (r'"([^"]*)"', str),
    'int': (r'(-?\d+)', int),
    'float': (r'(-?\d*\.?\d+)', float),
    'word': (r'([^\s]+)', str),
}

_PLACEHOLDER = re.compile(r'\{(' + '|'.join(PARAMETER_TYPES) + r')\}')


def compile_pattern(pattern: Union[str, Pattern]) -> Tuple[Pattern, List[Callable[[str], Any]]]:
    """
    Compile a step pattern into an anchored regex plus per-group converters.

    Patterns containing {string}/{int}/{float}/{word} are treated as
    expressions (the surrounding text is literal); anything else is a regex.
    """
    if not isinstance(pattern, str):
        return pattern, []

    if not _PLACEHOLDER.search(pattern):
        return re.compile(pattern, re.IGNORECASE), []

    converters = []
    parts = []
    position = 0
    for match in _PLACEHOLDER.finditer(pattern):
        regex, converter = PARAMETER_TYPES[match.group(1)]
        parts.append(re.escape(pattern[position:match.start()]))
        parts.append(regex)
        converters.append(converter)
        position = match.end()
    parts.append(re.escape(pattern[position:]))

    return re.compile(''.join(parts)), converters


@dataclass
class StepDefinition:
    """Represents a step definition with its pattern and function"""
    keyword: str  # given, when, then
    pattern: Pattern
    function: Callable
    description: str = ""
    expression: str = ""
    converters: List[Callable[[str], Any]] = field(default_factory=list)

    def match(self, step_text: str) -> Optional[re.Match]:
        return self.pattern.fullmatch(step_text.strip())

    async def execute(self, context: Any, step_text: str) -> Any:
        """Execute the step function with extracted parameters"""
        match = self.match(step_text)
        if not match:
            raise ValueError(f"Step text doesn't match pattern: {step_text}")

        params = list(match.groups())
        for i, converter in enumerate(self.converters):
            if params[i] is not None:
                params[i] = converter(params[i])

        # Execute function (handle both sync and async)
        if inspect.iscoroutinefunction(self.function):
            return await self.function(context, *params)
        else:
            return self.function(context, *params)


class StepDefinitionRegistry:
    """Registry for step definitions"""

    def __init__(self):
        self.definitions: List[StepDefinition] = []
        self._keyword_aliases = {
            'and': ['given', 'when', 'then'],
            'but': ['given', 'when', 'then'],
            'step': ['given', 'when', 'then'],
            '*': ['given', 'when', 'then'],
        }

    def add_definition(self, keyword: str, pattern: Union[str, Pattern], function: Callable, description: str = ""):
        """Add a step definition to registry"""
        keyword = keyword.lower()
        compiled, converters = compile_pattern(pattern)
        expression = pattern if isinstance(pattern, str) else pattern.pattern

        for existing in self.definitions:
            if existing.keyword == keyword and existing.expression == expression:
                raise ExecutionError(f"Duplicate step definition: {keyword} {expression}")

        definition = StepDefinition(
            keyword=keyword,
            pattern=compiled,
            function=function,
            description=description,
            expression=expression,
            converters=converters,
        )

        self.definitions.append(definition)
        logger.debug(f"Registered step: {keyword} {expression}")

    def given(self, pattern: str, description: str = ""):
        """Decorator for Given steps"""

        def decorator(func):
            self.add_definition('given', pattern, func, description)
            return func

        return decorator

    def when(self, pattern: str, description: str = ""):
        """Decorator for When steps"""

        def decorator(func):
            self.add_definition('when', pattern, func, description)
            return func

        return decorator

    def then(self, pattern: str, description: str = ""):
        """Decorator for Then steps"""

        def decorator(func):
            self.add_definition('then', pattern, func, description)
            return func

        return decorator

    def step(self, pattern: str, description: str = ""):
        """Decorator for any step type"""

        def decorator(func):
            for keyword in ['given', 'when', 'then']:
                self.add_definition(keyword, pattern, func, description)
            return func

        return decorator

    def find_step_definition(self, keyword: str, step_text: str) -> Optional[StepDefinition]:
        """
        Find the definition matching step text.

        Raises:
            ExecutionError: more than one definition matches
        """
        keyword = keyword.lower().strip()
        possible_keywords = self._keyword_aliases.get(keyword, [keyword])

        matches = [
            definition for definition in self.definitions
            if definition.keyword in possible_keywords and definition.match(step_text)
        ]

        # And/But fall back to every keyword; the same function under several keywords is one match
        functions = {id(definition.function) for definition in matches}
        if len(functions) > 1:
            patterns = ', '.join(definition.expression for definition in matches)
            raise ExecutionError(f"Ambiguous step '{step_text}' matches: {patterns}")

        if matches:
            logger.debug(f"Found matching step definition: {matches[0].expression}")
            return matches[0]

        logger.warning(f"No step definition found for: {keyword} {step_text}")
        logger.debug("Available patterns:")
        for definition in self.definitions:
            logger.debug(f"  {definition.keyword}: {definition.expression}")

        return None

    def list_definitions(self) -> List[Dict[str, str]]:
        """List all registered step definitions"""
        return [
            {
                'keyword': defn.keyword,
                'pattern': defn.expression,
                'description': defn.description,
                'function': defn.function.__name__
            }
            for defn in self.definitions
        ]

    def clear(self):
        """Clear all registered definitions"""
        self.definitions.clear()

    def register_from_module(self, module):
        """Register all functions marked with the module-level given/when/then decorators"""
        for name, obj in inspect.getmembers(module, inspect.isfunction):
            for step_info in getattr(obj, '_step_definitions', []):
                self.add_definition(
                    step_info['keyword'],
                    step_info['pattern'],
                    obj,
                    step_info.get('description', '')
                )


def _mark(keyword: str, pattern: str, description: str):
    def decorator(func):
        if not hasattr(func, '_step_definitions'):
            func._step_definitions = []
        func._step_definitions.append({
            'keyword': keyword,
            'pattern': pattern,
            'description': description
        })
        return func

    return decorator


# Utility decorators for marking functions as step definitions
def given(pattern: str, description: str = ""):
    """Mark function as a Given step"""
    return _mark('given', pattern, description)


def when(pattern: str, description: str = ""):
    """Mark function as a When step"""
    return _mark('when', pattern, description)


def then(pattern: str, description: str = ""):
    """Mark function as a Then step"""
    return _mark('then', pattern, description)
