"""Built-in paste-mode inputs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

HELLO_WORLD_TEMPLATE = """\
// File: package.json
{
  "name": "hello-world",
  "private": true,
  "version": "0.0.1",
  "type": "module",
  "scripts": {
    "dev": "vite",
    "build": "vite build",
    "preview": "vite preview"
  },
  "devDependencies": {
    "vite": "^5.0.0"
  }
}

// File: index.html
<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <title>Hello World</title>
  </head>
  <body>
    <div id="app"></div>
    <script type="module" src="/src/main.js"></script>
  </body>
</html>

// File: src/main.js
document.querySelector("#app").innerHTML = "<h1>Hello World</h1>";
"""


@dataclass(slots=True)
class Template:
    name: str
    title: str
    loaded_message: str


TEMPLATES: dict[str, Template] = {
    "hello-world": Template(
        name="hello-world",
        title="Test template (Hello World)",
        loaded_message="Loaded Test Template (Hello World).",
    ),
    "self-source": Template(
        name="self-source",
        title="AutoDeploy source code",
        loaded_message="Loaded AutoDeploy Agent source code. Ready to replicate.",
    ),
}


def self_source(root: Path = PACKAGE_ROOT) -> str:
    """Concatenate this package's Python modules into one paste-mode prompt."""
    sections = []
    for path in sorted(root.rglob("*.py")):
        relative = path.relative_to(root.parent).as_posix()
        sections.append(f"# File: {relative}\n{path.read_text(encoding='utf-8')}")
    return "\n\n".join(sections)


def render_template(name: str) -> str | None:
    """Prompt text for ``name``, or None for an unknown template."""
    match name:
        case "hello-world":
            return HELLO_WORLD_TEMPLATE
        case "self-source":
            return self_source()
        case _:
            return None
