import pytest

from tidewater.errors import ConfigurationError
from tidewater.flags import FeatureSet, Flag, Target, flags_allowed_in_features, get_target_features


def test_browser_requires_cors():
    features = get_target_features(Target.BROWSER, consistent_ip_for_requests=True)
    assert Flag.CORS_ALLOWED in features.requires
    assert not flags_allowed_in_features(features, [])
    assert flags_allowed_in_features(features, [Flag.CORS_ALLOWED])


@pytest.mark.parametrize("target", [Target.BROWSER_EXTENSION, Target.NATIVE, Target.ANY])
def test_non_browser_targets_allow_cors_only_providers(target):
    features = get_target_features(target)
    assert flags_allowed_in_features(features, [Flag.CORS_ALLOWED])
    assert flags_allowed_in_features(features, [])


def test_missing_required_flag_rejects_regardless_of_others():
    features = FeatureSet(requires=frozenset({Flag.CORS_ALLOWED}))
    assert not flags_allowed_in_features(features, [Flag.CF_BLOCKED, "custom-flag"])


def test_ip_locked_disallowed_without_consistent_ip():
    features = get_target_features(Target.NATIVE, consistent_ip_for_requests=False)
    assert not flags_allowed_in_features(features, [Flag.IP_LOCKED])


def test_ip_locked_allowed_with_consistent_ip():
    features = get_target_features(Target.NATIVE, consistent_ip_for_requests=True)
    assert flags_allowed_in_features(features, [Flag.IP_LOCKED])


def test_feature_sets_are_not_shared_between_calls():
    get_target_features(Target.ANY, consistent_ip_for_requests=False)
    features = get_target_features(Target.ANY, consistent_ip_for_requests=True)
    assert features.disallowed == frozenset()


def test_plain_string_flags_match_enum_members():
    features = get_target_features("browser", consistent_ip_for_requests=True)
    assert flags_allowed_in_features(features, ["cors-allowed"])


def test_unknown_target_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        get_target_features("toaster")
