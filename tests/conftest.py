"""Shared fixtures for pythicket tests."""

import io

import pytest

from pythicket import (
    ExportRegistry,
    Evaluator,
    Environment,
    create_queued_natives,
    evaluate_program,
    module,
)


@pytest.fixture
def output():
    """Captures what the print native writes"""
    return io.StringIO()


@pytest.fixture
def natives(output):
    return create_queued_natives([], output=output)


@pytest.fixture
def run_main(natives):
    """Run a single Main module built from the given statements"""
    def _run(*body, exports=None):
        return evaluate_program([module("Main", list(body), exports)], natives)
    return _run


@pytest.fixture
def run_modules(natives):
    def _run(*modules, check_dependencies=True):
        return evaluate_program(list(modules), natives, check_dependencies=check_dependencies)
    return _run


@pytest.fixture
def evaluator(natives):
    """Evaluator over an empty program, for expression-level tests"""
    return Evaluator(ExportRegistry([], natives))


@pytest.fixture
def env():
    return Environment()
