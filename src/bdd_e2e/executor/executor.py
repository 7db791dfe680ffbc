import asyncio
import time
from typing import Dict, List, Any, Optional, Tuple, Union
from pathlib import Path
from datetime import datetime
import logging

from behave.parser import parse_feature
from behave.model import Feature, Scenario, Step
from cucumber_tag_expressions import parse as parse_tag_expression

from ..core.config import Settings
from ..core.exceptions import ConfigurationError, StepDefinitionNotFoundError
from . import hooks
from .hooks import BrowserSession
from .step_definitions import StepDefinitionRegistry
from .world import World
from .report_collector import ReportCollector

logger = logging.getLogger(__name__)

Job = Tuple[int, Feature, Scenario]


class TestExecutor:
    """
    Executes Gherkin feature files against Playwright.

    Features are parsed with behave, filtered by a cucumber tag expression and
    distributed over `workers` asyncio workers, each owning its own browser.
    Every scenario attempt gets a fresh World and browsing context.
    """
    __test__ = False  # not a pytest test class

    def __init__(self, settings: Optional[Settings] = None,
                 step_registry: Optional[StepDefinitionRegistry] = None,
                 report_collector: Optional[ReportCollector] = None):
        self.settings = settings or Settings.from_env()
        self.settings.validate()

        self.step_registry = step_registry or StepDefinitionRegistry()
        self.report_collector = report_collector or ReportCollector(self.settings.reports_dir)

        if step_registry is None:
            self._register_builtin_steps()

        self.tag_expression = parse_tag_expression(self.settings.tags) if self.settings.tags.strip() else None

    def _register_builtin_steps(self):
        """Register the built-in step catalog"""
        from ..steps import load_steps

        load_steps(self.step_registry)
        logger.info(f"Registered {len(self.step_registry.definitions)} step definitions")

    def load_features(self, path: Union[str, Path]) -> List[Feature]:
        """Parse a feature file, or every *.feature file under a directory"""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Feature path not found: {path}")

        files = [path] if path.is_file() else sorted(path.glob('**/*.feature'))
        features = []
        for feature_file in files:
            with open(feature_file, 'r', encoding='utf-8') as f:
                feature = parse_feature(f.read(), filename=str(feature_file))
            if feature is not None:
                features.append(feature)

        logger.info(f"Loaded {len(features)} feature file(s) from {path}")
        return features

    def should_run(self, scenario: Scenario) -> bool:
        """Check the scenario's tags (including inherited feature tags) against the tag expression"""
        if self.tag_expression is None:
            return True
        tags = ['@' + str(tag) for tag in scenario.effective_tags]
        return self.tag_expression.evaluate(tags)

    def collect_jobs(self, features: List[Feature]) -> List[Job]:
        """Expand outlines and keep the scenarios selected by tags, in file order"""
        jobs = []
        for feature in features:
            for scenario in feature.walk_scenarios():
                if self.should_run(scenario):
                    jobs.append((len(jobs), feature, scenario))
        return jobs

    async def run(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Run every selected scenario under path and write reports.

        Raises:
            Exception: a browser failed to launch; the run is aborted
        """
        start_time = datetime.now()
        features = self.load_features(path)
        jobs = self.collect_jobs(features)
        logger.info(f"Selected {len(jobs)} scenario(s) (tags: {self.settings.tags or 'all'})")

        scenario_results: Dict[int, Dict[str, Any]] = {}
        if jobs:
            worker_count = min(self.settings.workers, len(jobs))
            sessions = await self._launch_sessions(worker_count)

            queue: asyncio.Queue = asyncio.Queue()
            for job in jobs:
                queue.put_nowait(job)

            tasks = [asyncio.create_task(self._worker(session, queue, scenario_results)) for session in sessions]
            try:
                await asyncio.gather(*tasks)
            finally:
                # Browsers close only once no worker is still using them
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                for session in sessions:
                    await hooks.after_all(session)

        results = self._build_results(features, jobs, scenario_results, start_time)
        self.report_collector.write_json(results)
        self.report_collector.write_html(results)
        return results

    async def _launch_sessions(self, count: int) -> List[BrowserSession]:
        sessions = []
        try:
            for _ in range(count):
                sessions.append(await hooks.before_all(BrowserSession(self.settings)))
        except Exception:
            for session in sessions:
                await hooks.after_all(session)
            raise
        return sessions

    async def _worker(self, session: BrowserSession, queue: asyncio.Queue,
                      results: Dict[int, Dict[str, Any]]) -> None:
        while True:
            try:
                index, _, scenario = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await self.execute_scenario_with_retries(session, scenario)

    async def execute_scenario_with_retries(self, session: BrowserSession, scenario: Scenario) -> Dict[str, Any]:
        """Run a scenario, re-running it on failure up to `retries` more times"""
        attempts = self.settings.retries + 1
        for attempt in range(1, attempts + 1):
            result = await self.execute_scenario(session, scenario)
            result['attempts'] = attempt
            if result['status'] == 'passed':
                break
            if attempt < attempts:
                logger.warning(f"[Scenario] Retrying '{scenario.name}' ({attempt}/{self.settings.retries})")
        return result

    async def execute_scenario(self, session: BrowserSession, scenario: Scenario) -> Dict[str, Any]:
        """Execute a single scenario (background steps first) in a fresh World"""
        result = {
            'name': scenario.name,
            'line': scenario.line,
            'tags': [str(tag) for tag in scenario.tags],
            'steps': [],
            'status': 'passed',
            'start_time': datetime.now().isoformat()
        }
        started = time.monotonic()
        world = World(self.settings, session, scenario.name)

        try:
            await hooks.before_scenario(world, scenario)
        except Exception as e:
            result['status'] = 'failed'
            result['error'] = f"Before hook failed: {e}"

        for step in scenario.all_steps:
            if result['status'] == 'failed':
                result['steps'].append(self._step_result(step, 'skipped'))
                continue

            step_result = await self._execute_step(world, step)
            result['steps'].append(step_result)
            if step_result['status'] != 'passed':
                result['status'] = 'failed'
                result['error'] = step_result.get('error')

        screenshot = await hooks.after_scenario(world, scenario, failed=result['status'] == 'failed')
        if screenshot:
            result['screenshot'] = screenshot

        result['end_time'] = datetime.now().isoformat()
        result['duration'] = time.monotonic() - started
        return result

    async def _execute_step(self, world: World, step: Step) -> Dict[str, Any]:
        """Execute one step; failures are recorded on the result, never raised"""
        step_result = self._step_result(step, 'passed')
        started = time.monotonic()

        try:
            world.current_step = step

            # step_type is behave's resolved keyword, so And/But follow the previous step
            step_def = self.step_registry.find_step_definition(step.step_type, step.name)
            if not step_def:
                raise StepDefinitionNotFoundError(
                    f"No step definition found for: {step.keyword} {step.name}"
                )

            await step_def.execute(world, step.name)

        except StepDefinitionNotFoundError as e:
            step_result['status'] = 'undefined'
            step_result['error'] = str(e)
        except AssertionError as e:
            step_result['status'] = 'failed'
            step_result['error'] = f"AssertionError: {e}"
            logger.error(f"[Step] FAILED: {step.keyword} {step.name}: {e}")
        except Exception as e:
            step_result['status'] = 'failed'
            step_result['error'] = f"{type(e).__name__}: {e}"
            logger.error(f"[Step] FAILED: {step.keyword} {step.name}: {e}", exc_info=True)
        finally:
            world.current_step = None
            step_result['duration'] = time.monotonic() - started

        return step_result

    @staticmethod
    def _step_result(step: Step, status: str) -> Dict[str, Any]:
        return {
            'keyword': step.keyword,
            'name': step.name,
            'line': step.line,
            'status': status,
            'duration': 0.0,
        }

    def _build_results(self, features: List[Feature], jobs: List[Job],
                       scenario_results: Dict[int, Dict[str, Any]], start_time: datetime) -> Dict[str, Any]:
        by_feature: Dict[int, List[Dict[str, Any]]] = {}
        for index, feature, _ in jobs:
            if index in scenario_results:
                by_feature.setdefault(id(feature), []).append(scenario_results[index])

        feature_results = []
        for feature in features:
            scenarios = by_feature.get(id(feature), [])
            if not scenarios:
                continue
            feature_results.append({
                'feature': feature.name,
                'description': '\n'.join(feature.description or []),
                'file': str(feature.filename),
                'line': feature.line,
                'tags': [str(tag) for tag in feature.tags],
                'scenarios': scenarios,
                'status': 'failed' if any(s['status'] == 'failed' for s in scenarios) else 'passed',
            })

        all_scenarios = [s for f in feature_results for s in f['scenarios']]
        passed = sum(1 for s in all_scenarios if s['status'] == 'passed')

        return {
            'features': feature_results,
            'summary': {
                'total': len(all_scenarios),
                'passed': passed,
                'failed': len(all_scenarios) - passed,
                'features': len(feature_results),
            },
            'start_time': start_time.isoformat(),
            'end_time': datetime.now().isoformat(),
        }

    def execute(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Synchronous entry point around run()"""
        return asyncio.run(self.run(path))

    def list_all_steps(self) -> List[Dict[str, str]]:
        """List every registered step definition"""
        return self.step_registry.list_definitions()

    def validate(self) -> bool:
        """Check configuration without raising"""
        try:
            self.settings.validate()
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            return False
        return True
