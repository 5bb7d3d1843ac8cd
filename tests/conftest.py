import textwrap
from pathlib import Path

import pytest

from tests.infrastructure import write


@pytest.fixture
def users_env():
    """Окружение со списком записей, как в примерах из README."""
    return {
        "title": "Team",
        "count": 4,
        "users": [
            {"name": "Ann", "admin": True, "age": 31},
            {"name": "Bob", "admin": False, "age": 27},
        ],
    }


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Каталог с шаблоном и YAML-окружением для тестов CLI."""
    write(
        tmp_path / "page.html",
        textwrap.dedent("""\
        {@keys title users}
        <h1>{title}</h1>
        <ul>
        {#for u in users}  <li>{u[name]}</li>
        {/}</ul>
        """),
    )
    write(
        tmp_path / "env.yaml",
        textwrap.dedent("""\
        title: Team
        users:
          - name: Ann
          - name: Bob
        """),
    )
    return tmp_path
