import json
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any, Union
import logging
from jinja2 import Template

logger = logging.getLogger(__name__)

JSON_REPORT = "cucumber-report.json"
HTML_REPORT = "cucumber-report.html"
SUMMARY_REPORT = "report.html"

_STYLE = """
        body {
            font-family: Arial, sans-serif;
            margin: 20px;
            background-color: #f5f5f5;
        }
        .header {
            background-color: #333;
            color: white;
            padding: 20px;
            border-radius: 5px;
            margin-bottom: 20px;
        }
        .summary {
            display: flex;
            gap: 20px;
            margin-bottom: 30px;
        }
        .summary-card {
            background: white;
            padding: 20px;
            border-radius: 5px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            flex: 1;
            text-align: center;
        }
        .summary-card h3 {
            margin: 0 0 10px 0;
            color: #666;
        }
        .summary-card .number {
            font-size: 36px;
            font-weight: bold;
        }
        .passed { color: #28a745; }
        .failed { color: #dc3545; }
        .skipped { color: #ffc107; }
        .undefined { color: #6c757d; }
        .error {
            background-color: #f8d7da;
            color: #721c24;
            padding: 10px;
            margin: 10px 0 10px 20px;
            border-radius: 3px;
            font-size: 12px;
        }
"""

HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>BDD E2E Report - {{ timestamp }}</title>
    <style>{{ style|safe }}
        .feature {
            background: white;
            margin-bottom: 20px;
            border-radius: 5px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            overflow: hidden;
        }
        .feature-header {
            background: #f8f9fa;
            padding: 15px 20px;
            border-bottom: 1px solid #dee2e6;
            cursor: pointer;
        }
        .feature-header.passed { border-left: 5px solid #28a745; }
        .feature-header.failed { border-left: 5px solid #dc3545; }
        .scenario {
            padding: 15px 20px;
            border-bottom: 1px solid #eee;
        }
        .scenario-header {
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 10px;
        }
        .scenario-name { font-weight: bold; }
        .status-badge {
            padding: 4px 8px;
            border-radius: 3px;
            font-size: 12px;
            color: white;
        }
        .status-badge.passed { background-color: #28a745; }
        .status-badge.failed { background-color: #dc3545; }
        .step {
            margin-left: 20px;
            padding: 5px 0;
            font-family: monospace;
            font-size: 14px;
        }
        .step.passed::before { content: "✓ "; color: #28a745; }
        .step.failed::before { content: "✗ "; color: #dc3545; }
        .step.skipped::before { content: "- "; color: #ffc107; }
        .step.undefined::before { content: "? "; color: #6c757d; }
        .tag {
            background-color: #e9ecef;
            padding: 2px 6px;
            border-radius: 3px;
            font-size: 11px;
            color: #495057;
        }
        .meta {
            color: #6c757d;
            font-size: 12px;
        }
    </style>
    <script>
        function toggleFeature(featureId) {
            const content = document.getElementById(featureId);
            content.style.display = content.style.display === 'none' ? 'block' : 'none';
        }
    </script>
</head>
<body>
    <div class="header">
        <h1>BDD E2E Report</h1>
        <p>Generated: {{ timestamp }}</p>
        <p>Duration: {{ duration }}</p>
    </div>

    <div class="summary">
        <div class="summary-card">
            <h3>Scenarios</h3>
            <div class="number">{{ summary.total }}</div>
        </div>
        <div class="summary-card">
            <h3>Passed</h3>
            <div class="number passed">{{ summary.passed }}</div>
        </div>
        <div class="summary-card">
            <h3>Failed</h3>
            <div class="number failed">{{ summary.failed }}</div>
        </div>
        <div class="summary-card">
            <h3>Pass Rate</h3>
            <div class="number">{{ pass_rate }}%</div>
        </div>
    </div>

    {% for feature in features %}
    <div class="feature">
        <div class="feature-header {{ feature.status }}" onclick="toggleFeature('feature-{{ loop.index }}')">
            <h2>{{ feature.feature }}</h2>
            <div class="meta">{{ feature.file }}</div>
        </div>
        <div id="feature-{{ loop.index }}">
            {% for scenario in feature.scenarios %}
            <div class="scenario">
                <div class="scenario-header">
                    <div>
                        <div class="scenario-name">{{ scenario.name }}</div>
                        {% for tag in scenario.tags %}<span class="tag">@{{ tag }}</span> {% endfor %}
                        {% if scenario.attempts and scenario.attempts > 1 %}
                        <div class="meta">Attempts: {{ scenario.attempts }}</div>
                        {% endif %}
                    </div>
                    <span class="status-badge {{ scenario.status }}">{{ scenario.status|upper }}</span>
                </div>

                {% for step in scenario.steps %}
                <div class="step {{ step.status }}">{{ step.keyword }} {{ step.name }}</div>
                {% if step.error %}
                <div class="error">{{ step.error }}</div>
                {% endif %}
                {% endfor %}
                {% if scenario.screenshot %}
                <div class="meta">Screenshot: {{ scenario.screenshot }}</div>
                {% endif %}
            </div>
            {% endfor %}
        </div>
    </div>
    {% endfor %}
</body>
</html>
"""

SUMMARY_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Test Summary - {{ timestamp }}</title>
    <style>{{ style|safe }}
        table {
            width: 100%;
            border-collapse: collapse;
            background: white;
        }
        th, td {
            text-align: left;
            padding: 8px;
            border-bottom: 1px solid #dee2e6;
            font-size: 14px;
        }
        th { background: #f8f9fa; }
    </style>
</head>
<body>
    <div class="header">
        <h1>Test Summary</h1>
        <p>Generated: {{ timestamp }}</p>
        <p>Source: {{ source }}</p>
    </div>

    <div class="summary">
        <div class="summary-card">
            <h3>Scenarios</h3>
            <div class="number">{{ scenarios.total }}</div>
        </div>
        <div class="summary-card">
            <h3>Passed</h3>
            <div class="number passed">{{ scenarios.passed }}</div>
        </div>
        <div class="summary-card">
            <h3>Failed</h3>
            <div class="number failed">{{ scenarios.failed }}</div>
        </div>
        <div class="summary-card">
            <h3>Steps</h3>
            <div class="number">{{ rows|length }}</div>
        </div>
    </div>

    <table>
        <tr><th>Feature</th><th>Scenario</th><th>Step</th><th>Status</th><th>Duration (ms)</th></tr>
        {% for row in rows %}
        <tr>
            <td>{{ row.feature }}</td>
            <td>{{ row.scenario }}</td>
            <td>{{ row.step }}</td>
            <td class="{{ row.status }}">{{ row.status }}</td>
            <td>{{ row.duration_ms }}</td>
        </tr>
        {% if row.error %}
        <tr><td colspan="5"><div class="error">{{ row.error }}</div></td></tr>
        {% endif %}
        {% endfor %}
    </table>
</body>
</html>
"""


class ReportCollector:
    """Writes run results as cucumber JSON, an HTML report and a summary page"""

    def __init__(self, output_dir: Union[str, Path] = "reports"):
        self.output_dir = Path(output_dir)

    @property
    def json_path(self) -> Path:
        return self.output_dir / JSON_REPORT

    @property
    def html_path(self) -> Path:
        return self.output_dir / HTML_REPORT

    @staticmethod
    def to_cucumber(results: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Convert executor results to the cucumber JSON layout.

        Step durations are reported in nanoseconds, as cucumber does.
        """
        cucumber = []
        for feature in results.get('features', []):
            elements = []
            for scenario in feature.get('scenarios', []):
                steps = []
                for step in scenario.get('steps', []):
                    step_result = {
                        'status': step['status'],
                        'duration': int(step.get('duration', 0) * 1_000_000_000),
                    }
                    if step.get('error'):
                        step_result['error_message'] = step['error']
                    steps.append({
                        'keyword': step['keyword'] + ' ',
                        'name': step['name'],
                        'line': step.get('line'),
                        'result': step_result,
                    })

                elements.append({
                    'id': _slug(f"{feature['feature']};{scenario['name']}"),
                    'keyword': 'Scenario',
                    'type': 'scenario',
                    'name': scenario['name'],
                    'line': scenario.get('line'),
                    'tags': [{'name': '@' + tag} for tag in scenario.get('tags', [])],
                    'steps': steps,
                })

            cucumber.append({
                'id': _slug(feature['feature']),
                'uri': feature.get('file', ''),
                'keyword': 'Feature',
                'name': feature['feature'],
                'description': feature.get('description', ''),
                'line': feature.get('line'),
                'tags': [{'name': '@' + tag} for tag in feature.get('tags', [])],
                'elements': elements,
            })
        return cucumber

    def write_json(self, results: Dict[str, Any]) -> str:
        """Write reports/cucumber-report.json"""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        with open(self.json_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_cucumber(results), f, indent=2)

        logger.info(f"JSON report generated: {self.json_path}")
        return str(self.json_path)

    def write_html(self, results: Dict[str, Any]) -> str:
        """Write reports/cucumber-report.html"""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        summary = results.get('summary', {})
        total = summary.get('total', 0)
        passed = summary.get('passed', 0)
        pass_rate = round((passed / total * 100) if total > 0 else 0, 1)

        now = datetime.now().isoformat()
        start_time = datetime.fromisoformat(results.get('start_time', now))
        end_time = datetime.fromisoformat(results.get('end_time', now))

        html_content = Template(HTML_TEMPLATE, autoescape=True).render(
            style=_STYLE,
            timestamp=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            duration=str(end_time - start_time),
            summary=summary,
            pass_rate=pass_rate,
            features=results.get('features', []),
        )

        with open(self.html_path, 'w', encoding='utf-8') as f:
            f.write(html_content)

        logger.info(f"HTML report generated: {self.html_path}")
        return str(self.html_path)

    def generate_summary(self, json_path: Union[str, Path, None] = None,
                         html_path: Union[str, Path, None] = None) -> str:
        """
        Build a summary page from an existing cucumber JSON report.

        Args:
            json_path: Cucumber JSON to read, defaults to reports/cucumber-report.json
            html_path: Output file, defaults to reports/report.html

        Returns:
            Path to the summary page

        Raises:
            FileNotFoundError: the JSON report does not exist
        """
        json_path = Path(json_path) if json_path else self.json_path
        html_path = Path(html_path) if html_path else self.output_dir / SUMMARY_REPORT

        if not json_path.exists():
            raise FileNotFoundError(f"No test results found: {json_path}")

        with open(json_path, 'r', encoding='utf-8') as f:
            features = json.load(f)

        rows = []
        scenarios = {'total': 0, 'passed': 0, 'failed': 0}
        for feature in features:
            for element in feature.get('elements', []):
                statuses = [step.get('result', {}).get('status') for step in element.get('steps', [])]
                scenarios['total'] += 1
                if all(status == 'passed' for status in statuses):
                    scenarios['passed'] += 1
                else:
                    scenarios['failed'] += 1

                for step in element.get('steps', []):
                    result = step.get('result', {})
                    rows.append({
                        'feature': feature.get('name', ''),
                        'scenario': element.get('name', ''),
                        'step': f"{step.get('keyword', '')}{step.get('name', '')}",
                        'status': result.get('status', 'unknown'),
                        'duration_ms': round(result.get('duration', 0) / 1_000_000, 1),
                        'error': result.get('error_message'),
                    })

        html_content = Template(SUMMARY_TEMPLATE, autoescape=True).render(
            style=_STYLE,
            timestamp=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            source=str(json_path),
            scenarios=scenarios,
            rows=rows,
        )

        html_path.parent.mkdir(parents=True, exist_ok=True)
        with open(html_path, 'w', encoding='utf-8') as f:
            f.write(html_content)

        logger.info(f"Summary report generated: {html_path}")
        return str(html_path)


def _slug(text: str) -> str:
    return '-'.join(text.lower().split())
