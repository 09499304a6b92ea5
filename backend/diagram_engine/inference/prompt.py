SYSTEM_PROMPT = """
You explain ONE component of a software architecture diagram as strict JSON.

Rules:
- Output ONLY valid JSON
- No markdown, no commentary
- Each value is 1-3 sentences of plain text
- Refer to the project by name
- Do not invent components that are not listed

JSON schema:
{
  "whyChosen": "string",
  "howItFits": "string",
  "tradeoffs": "string",
  "bestPractices": "string"
}
"""


def build_user_prompt(
    project_name: str,
    project_description: str,
    diagram_title: str,
    node_label: str,
    node_type: str,
    node_description: str,
    related: str,
) -> str:
    return (
        f"Project: {project_name}\n"
        f"Project description: {project_description or 'n/a'}\n"
        f"Diagram: {diagram_title}\n"
        f"Component: {node_label} ({node_type})\n"
        f"Component description: {node_description or 'n/a'}\n"
        f"Related project elements: {related or 'n/a'}\n"
    )
