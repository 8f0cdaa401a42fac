"""Pytest configuration file"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tests.settings")

import django
import pytest
from django.apps import apps

from tests.trees import BASE_DATA, DEPARTMENT_CODES


def pytest_report_header(config):
    return "Django: " + django.get_version()


def pytest_configure(config):
    django.setup()


@pytest.fixture(scope="function", params=["Department", "Category"])
def model(request, db):
    model = apps.get_model("tests", request.param)
    model.load_bulk(BASE_DATA)
    return model


@pytest.fixture(scope="function")
def department(db):
    model = apps.get_model("tests", "Department")
    model.load_bulk(BASE_DATA)
    for name, code in DEPARTMENT_CODES.items():
        model.objects.filter(name=name).update(code=code)
    return model
