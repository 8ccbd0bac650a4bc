"""BDD tests for order cancellation."""

from pytest_bdd import scenarios

scenarios("features/cancellation.feature")
