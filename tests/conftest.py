"""Shared test fixtures."""
from __future__ import annotations

import pytest

from quizgen.db import Database
from quizgen.models import AssessmentDefinition, ContentModule, Section


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def sample_modules():
    """Two modules; sections deliberately declared out of order."""
    return [
        ContentModule(
            id="networking",
            title="Networking Basics",
            description="How computers talk to each other.",
            sections=[
                Section("Routing", "Routers forward packets between networks.", order=2),
                Section("Addressing", "Every host has an IP address.", order=1),
            ],
        ),
        ContentModule(
            id="security",
            title="Security Fundamentals",
            description="Protecting systems and data.",
            sections=[
                Section("Encryption", "Encryption keeps data confidential.", order=1),
            ],
        ),
    ]


@pytest.fixture
def sample_exams():
    return [
        AssessmentDefinition(
            id="net-cert",
            title="Network Associate",
            associated_module_ids=["networking"],
        ),
        AssessmentDefinition(
            id="sec-cert",
            title="Security Associate",
            description="Covers   threat models\nand encryption.",
        ),
        AssessmentDefinition(id="blank-cert", title="Blank Exam"),
    ]


@pytest.fixture
def populated_db(tmp_db, sample_modules, sample_exams):
    """A database pre-loaded with sample modules and exams."""
    tmp_db.import_modules(sample_modules, source_file="sample.md")
    tmp_db.import_exams(sample_exams)
    return tmp_db


@pytest.fixture
def quiz_response():
    """A well-formed two-question LLM response."""
    return """\
Here are your questions:

Question 1: What does a router do?
a) Stores files
b) Forwards packets between networks
c) Encrypts disks
d) Prints documents
Correct answer: b
Explanation: Routers operate at the network layer
and forward packets between networks.

Question 2: Every host on an IP network has an address.
Correct answer: True
Explanation: Hosts need an address to be reachable.
"""


@pytest.fixture
def module_md_content():
    """Minimal module markdown for parser testing."""
    return """\
<!-- id: networking -->
# Networking Basics

How computers talk
to each other.

## Addressing

Every host has an IP address.

Addresses can be static or dynamic.

## Routing

Routers forward packets between networks.
"""
