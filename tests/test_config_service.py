import copy

import pytest

from crane_crm.errors import ValidationError
from crane_crm.models.config_document import ConfigDocument
from crane_crm.services import config_service


def _limits(**changes):
    limits = copy.deepcopy(config_service.DEFAULT_QUOTATION_CONFIG["orderTypeLimits"])
    for order_type, values in changes.items():
        limits[order_type].update(values)
    return limits


def test_first_read_writes_defaults(app):
    assert ConfigDocument.query.filter_by(key="resourceRates").first() is None
    rates = config_service.get_resource_rates_config()
    assert rates == {"foodRatePerMonth": 2500, "accommodationRatePerMonth": 4000}
    assert ConfigDocument.query.filter_by(key="resourceRates").one().data == rates


def test_load_or_initialize_with_custom_defaults(app):
    data = config_service.load_or_initialize("featureFlags", {"beta": True})
    assert data == {"beta": True}
    assert config_service.load_or_initialize("featureFlags", {"beta": False}) == {"beta": True}


def test_update_merges_top_level_keys(app):
    config_service.update_resource_rates_config({"foodRatePerMonth": 3000})
    rates = config_service.get_resource_rates_config()
    assert rates == {"foodRatePerMonth": 3000, "accommodationRatePerMonth": 4000}


def test_negative_resource_rate_rejected(app):
    with pytest.raises(ValidationError):
        config_service.update_resource_rates_config({"foodRatePerMonth": -1})
    assert config_service.get_resource_rates_config()["foodRatePerMonth"] == 2500


def test_default_limits_are_valid():
    config_service.validate_order_type_limits(_limits())


def test_adjacent_limits_are_accepted():
    # small.minDays 11 > micro.maxDays 10
    config_service.validate_order_type_limits(_limits(small={"minDays": 11}))


def test_overlapping_limits_rejected():
    with pytest.raises(ValidationError) as exc:
        config_service.validate_order_type_limits(_limits(small={"minDays": 10}))
    assert exc.value.message == "Small minimum days must be greater than previous maximum"
    assert exc.value.field == "small"


def test_max_not_above_min_rejected():
    with pytest.raises(ValidationError) as exc:
        config_service.validate_order_type_limits(_limits(monthly={"maxDays": 26}))
    assert "Monthly maximum days" in exc.value.message


def test_missing_order_type_rejected():
    limits = _limits()
    del limits["yearly"]
    with pytest.raises(ValidationError):
        config_service.validate_order_type_limits(limits)


def test_invalid_quotation_config_is_not_saved(app):
    with pytest.raises(ValidationError):
        config_service.update_quotation_config({"orderTypeLimits": _limits(micro={"maxDays": 12})})
    stored = config_service.get_quotation_config()
    assert stored["orderTypeLimits"]["micro"]["maxDays"] == 10


def test_legacy_light_usage_rate(app):
    config_service.save_document(
        config_service.ADDITIONAL_PARAMS_KEY, {"usageRates": {"light": 7, "heavy": 12}}
    )
    params = config_service.get_additional_params_config()
    assert params["usageRates"] == {"normal": 7, "heavy": 12}
    assert config_service.get_rate_tables().usage_rates["normal"] == 7


def test_additional_params_validation(app):
    with pytest.raises(ValidationError):
        config_service.update_additional_params_config({"riskFactors": {"low": -5}})
    with pytest.raises(ValidationError):
        config_service.update_additional_params_config({"riskFactors": 5})

    config_service.update_additional_params_config({"riskFactors": {"low": 8, "medium": 12, "high": 20}})
    assert config_service.get_rate_tables().risk_factors == {"low": 8.0, "medium": 12.0, "high": 20.0}



def test_partial_section_update_keeps_other_keys(app):
    config_service.update_additional_params_config({"riskFactors": {"low": 8, "medium": 12, "high": 20}})
    config_service.update_additional_params_config({"riskFactors": {"low": 20}})

    params = config_service.get_additional_params_config()
    assert params["riskFactors"] == {"low": 20, "medium": 12, "high": 20}
    assert params["usageRates"] == {"normal": 5, "heavy": 10}


def test_partial_update_rewrites_legacy_usage_key(app):
    config_service.save_document(
        config_service.ADDITIONAL_PARAMS_KEY, {"usageRates": {"light": 7, "heavy": 12}}
    )
    config_service.update_additional_params_config({"usageRates": {"heavy": 15}})
    assert config_service.get_additional_params_config()["usageRates"] == {"normal": 7, "heavy": 15}

def test_default_template_config(app):
    assert config_service.get_default_template_config() == {"defaultTemplateId": None}
    config_service.update_default_template_config(3)
    assert config_service.get_default_template_config() == {"defaultTemplateId": 3}
