"""BDD tests for payment settlement."""

from pytest_bdd import scenarios

scenarios("features/settlement.feature")
