"""Nox sessions for testing and quality assurance of env-failover."""

import nox

nox.options.default_venv_backend = "uv"
nox.options.sessions = ["tests", "lint", "typecheck", "check_isolation"]

PYTHON_VERSIONS = ["3.13", "3.14"]
PACKAGE = "env_failover"


def _sync(session: nox.Session, *extras: str) -> None:
    """Install the project into the session environment."""
    args = ["uv", "sync", "--active"]
    for extra in extras:
        args.extend(["--extra", extra])
    session.run(*args, external=True)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run unit and property tests with coverage.

    Extra arguments are passed to pytest, e.g. ``nox -s tests -- -k executor``.

    Args:
        session: The nox session object.
    """
    _sync(session, "test")
    session.run(
        "pytest",
        f"--cov={PACKAGE}",
        "--cov-report=term-missing:skip-covered",
        "--cov-fail-under=85",
        *session.posargs,
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def property_tests(session: nox.Session) -> None:
    """Run the Hypothesis suites with a fixed seed and statistics.

    Args:
        session: The nox session object.
    """
    _sync(session, "test")
    session.run("pytest", "tests/property", "--hypothesis-seed=0", "--hypothesis-show-statistics")


@nox.session(python=PYTHON_VERSIONS[-1])
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks.

    Args:
        session: The nox session object.
    """
    _sync(session, "dev")
    session.run("ruff", "check", "src", "tests", "scripts", "noxfile.py")
    session.run("ruff", "format", "--check", "src", "tests", "scripts", "noxfile.py")


@nox.session(python=PYTHON_VERSIONS[-1])
def typecheck(session: nox.Session) -> None:
    """Run basedpyright over src and tests.

    Args:
        session: The nox session object.
    """
    _sync(session, "test")
    session.run("uvx", "basedpyright@latest", external=True)


@nox.session(python=PYTHON_VERSIONS[-1])
def format(session: nox.Session) -> None:
    """Apply ruff fixes and formatting.

    Args:
        session: The nox session object.
    """
    _sync(session, "dev")
    session.run("ruff", "check", ".", "--fix")
    session.run("ruff", "format", ".")


@nox.session(python=PYTHON_VERSIONS[-1])
def coverage(session: nox.Session) -> None:
    """Write an HTML coverage report from the last test run.

    Args:
        session: The nox session object.
    """
    _sync(session, "test")
    session.run("coverage", "report", "--show-missing")
    session.run("coverage", "html")
    session.log("Coverage report generated in htmlcov/index.html")


@nox.session(python=False)
def check_isolation(session: nox.Session) -> None:
    """Check that core/ and types/ never import an HTTP client at module load.

    Args:
        session: The nox session object.
    """
    session.run("python3", "scripts/check_transport_isolation.py", external=True)
