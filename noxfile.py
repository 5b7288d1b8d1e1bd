import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with the test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (aggregate, events, errors, gates)."""
    _install(session)
    session.run("pytest", "tests/delivery/domain/")


@nox.session(python=PYTHON_VERSIONS[-1])
def demo(session: nox.Session) -> None:
    """Replay the demo scenarios with a deterministic acceptance gate."""
    _install(session)
    session.run("python", "-m", "delivery.demo", env={"DELIVERY_ACCEPTANCE_GATE": "fake"})


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_bdd(session: nox.Session) -> None:
    """Run the Gherkin order journeys."""
    _install(session)
    session.run("pytest", "tests/delivery/bdd/")
