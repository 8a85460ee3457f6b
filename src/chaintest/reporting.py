import json
import os
from typing import Any, Dict, List

from jinja2 import Template

from .models import STEP_ERROR, STEP_FAILED, STEP_PASSED, STEP_SKIPPED, ScenarioReport

HTML_TMPL = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>Connector Scenario Report</title>
  <style>
    body{font-family:Arial,Helvetica,sans-serif;margin:16px;color:#222}
    .summary{margin-bottom:20px;padding:12px;background:#f2f8ff;border:1px solid #cfe0ff}
    .scenario{border:1px solid #ddd;margin-bottom:12px;border-radius:6px;overflow:hidden}
    .sc-head{background:#eef6ff;padding:10px;cursor:pointer;display:flex;justify-content:space-between}
    .sc-body{display:none;padding:10px;background:#fff}
    .step{padding:8px;border-top:1px solid #f0f0f0}
    .passed{color:green;font-weight:600}
    .failed,.error{color:red;font-weight:700}
    .skipped{color:#999;font-weight:600}
    pre{background:#f7f7f7;padding:8px;border-radius:4px;overflow:auto}
    .meta{font-size:12px;color:#666}
    .badge{display:inline-block;padding:2px 8px;border-radius:12px;background:#ddd;margin-left:8px}
  </style>
</head>
<body>
  <h1>Connector Scenario Report</h1>
  <div class="summary">
    <div>Total scenarios: {{ summary.scenarios_total }}</div>
    <div>Scenarios: Passed {{ summary.passed }}  Failed {{ summary.failed }}{% if summary.aborted %}  Aborted {{ summary.aborted }}{% endif %}</div>
    <div>Steps: Passed {{ summary.steps.passed }}  Failed {{ summary.steps.failed }}
         Error {{ summary.steps.error }}  Skipped {{ summary.steps.skipped }}</div>
  </div>

  {% for s in scenarios %}
  <div class="scenario">
    <div class="sc-head" onclick="toggle('sc-{{ loop.index0 }}')">
      <div>
        <strong>{{ s.name }}</strong>
        {% if s.connector %}<span class="badge">{{ s.connector }}</span>{% endif %}
        {% if s.source %}<span class="meta">({{ s.source }})</span>{% endif %}
      </div>
      <div>
        <span class="badge">steps: {{ s.steps|length }}</span>
        {% if s.state == "aborted" %}<span class="error">ABORTED</span>{% elif s.ok %}<span class="passed">PASSED</span>{% else %}<span class="failed">FAILED</span>{% endif %}
      </div>
    </div>
    <div id="sc-{{ loop.index0 }}" class="sc-body">
      {% for step in s.steps %}
      <div class="step">
        <div><strong>[{{ step.index }}] {{ step.name }}</strong>
           <span class="meta"> - {{ step.operation }}{% if step.duration_ms is not none %}, {{ step.duration_ms }} ms{% endif %}</span>
           <span class="{{ step.status }}"> {{ step.status|upper }}</span>
           {% if step.gate is sameas false %}<span class="badge">gate closed</span>{% endif %}
        </div>
        {% if step.request %}
        <div class="meta">Request: {{ step.request.method }} {{ step.request.url }}{% if step.request.params %} {{ step.request.params|tojson }}{% endif %}</div>
        {% if step.request.body %}
        <div class="meta">Body: <pre>{{ step.request.body|tojson(indent=2) }}</pre></div>
        {% endif %}
        {% endif %}
        {% if step.response %}
        <div class="meta">Response: status {{ step.response.status_code }}</div>
        <div>Response: <pre>{{ step.response.text_snippet }}</pre></div>
        {% endif %}
        {% if step.assertions %}
        <ul>
          {% for a in step.assertions %}
          <li class="{% if a.ok %}passed{% else %}failed{% endif %}">{{ a.name }}{% if a.message %}: {{ a.message }}{% endif %}</li>
          {% endfor %}
        </ul>
        {% endif %}
        {% if step.extracted %}
        <div class="meta">Extracted: <pre>{{ step.extracted|tojson(indent=2) }}</pre></div>
        {% endif %}
        {% if step.error %}
        <div style="color:red"><strong>Error:</strong> {{ step.error }}</div>
        {% endif %}
      </div>
      {% endfor %}
    </div>
  </div>
  {% endfor %}

  <script>
    function toggle(id){
      var el = document.getElementById(id);
      if(!el) return;
      el.style.display = (el.style.display === 'none' || el.style.display === '') ? 'block' : 'none';
    }
  </script>
</body>
</html>
"""


def summarize(reports: List[ScenarioReport]) -> Dict[str, Any]:
    steps = {STEP_PASSED: 0, STEP_FAILED: 0, STEP_ERROR: 0, STEP_SKIPPED: 0}
    for r in reports:
        for status in steps:
            steps[status] += r.count(status)
    passed = sum(1 for r in reports if r.ok)
    return {
        "scenarios_total": len(reports),
        "passed": passed,
        "failed": len(reports) - passed,
        "aborted": sum(1 for r in reports if r.state == "aborted"),
        "steps": steps,
    }


def build_report(reports: List[ScenarioReport], final_state: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "summary": summarize(reports),
        "scenarios": [r.to_dict() for r in reports],
        "state": final_state,
    }


def write_json_report(report: Dict[str, Any], out_path: str) -> None:
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2, ensure_ascii=False, default=str)


def generate_html_report(report: Dict[str, Any], out_path: str) -> None:
    """
    report: the structure produced by build_report:
      {
        "summary": {...},
        "scenarios": [ { "name":..., "connector":..., "ok":..., "steps":[ {index,name,status,assertions,...} ] } ]
      }
    """
    tmpl = Template(HTML_TMPL)
    html = tmpl.render(summary=report["summary"], scenarios=report["scenarios"])
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as fh:
        fh.write(html)
