import pytest
from bdd_e2e.core import Settings, ConfigurationError, PROFILES, apply_profile


class TestSettingsDefaults:
    """Test default values when nothing is configured"""

    def test_defaults(self, tmp_path):
        settings = Settings.from_env({}, config_path=tmp_path / "missing.yaml")

        assert settings.base_url == "https://example.com"
        assert settings.api_url == "https://api.example.com"
        assert settings.browser == "chromium"
        assert settings.headless == True
        assert settings.slow_mo == 0
        assert settings.viewport == {"width": 1280, "height": 720}
        assert settings.timeout == 30000
        assert settings.navigation_timeout == 30000
        assert settings.action_timeout == 30000
        assert settings.workers == 4
        assert settings.retries == 2
        assert settings.tags == "@smoke"
        assert settings.log_level == "info"
        assert settings.is_ci == False
        assert settings.record_video == False
        assert settings.capture_screenshots == True
        assert settings.debug_mode == False

    def test_settings_are_frozen(self):
        settings = Settings()
        with pytest.raises(Exception):
            settings.browser = "firefox"


class TestSettingsFromEnv:
    """Test environment variable parsing"""

    @pytest.fixture
    def no_file(self, tmp_path):
        return tmp_path / "missing.yaml"

    def test_headless_is_on_unless_false(self, no_file):
        assert Settings.from_env({"HEADLESS": "false"}, no_file).headless == False
        assert Settings.from_env({"HEADLESS": "no"}, no_file).headless == True
        assert Settings.from_env({"HEADLESS": "0"}, no_file).headless == True

    def test_capture_screenshots_is_on_unless_false(self, no_file):
        assert Settings.from_env({"CAPTURE_SCREENSHOTS": "false"}, no_file).capture_screenshots == False
        assert Settings.from_env({"CAPTURE_SCREENSHOTS": "yes"}, no_file).capture_screenshots == True

    def test_other_flags_need_true(self, no_file):
        settings = Settings.from_env({"CI": "true", "RECORD_VIDEO": "1", "DEBUG": "TRUE"}, no_file)
        assert settings.is_ci == True
        assert settings.record_video == False
        assert settings.debug_mode == True

    def test_timeout_drives_navigation_and_action(self, no_file):
        settings = Settings.from_env({"TIMEOUT": "10000"}, no_file)
        assert settings.timeout == 10000
        assert settings.navigation_timeout == 10000
        assert settings.action_timeout == 10000

    def test_integers_and_strings(self, no_file):
        settings = Settings.from_env({
            "BASE_URL": "https://staging.example.com",
            "BROWSER": "firefox",
            "SLOW_MO": "50",
            "VIEWPORT_WIDTH": "1920",
            "VIEWPORT_HEIGHT": "1080",
            "WORKERS": "2",
            "RETRIES": "0",
            "TAGS": "@regression",
        }, no_file)

        assert settings.base_url == "https://staging.example.com"
        assert settings.browser == "firefox"
        assert settings.slow_mo == 50
        assert settings.viewport == {"width": 1920, "height": 1080}
        assert settings.workers == 2
        assert settings.retries == 0
        assert settings.tags == "@regression"

    def test_empty_values_are_ignored(self, no_file):
        assert Settings.from_env({"BROWSER": ""}, no_file).browser == "chromium"

    def test_invalid_integer(self, no_file):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"WORKERS": "many"}, no_file)


class TestSettingsYaml:
    """Test the optional YAML layer"""

    def test_yaml_between_defaults_and_env(self, tmp_path):
        config_file = tmp_path / "bdd-e2e.yaml"
        config_file.write_text("browser: webkit\nworkers: 3\nheadless: false\n")

        settings = Settings.from_env({"WORKERS": "1"}, config_file)

        assert settings.browser == "webkit"
        assert settings.headless == False
        assert settings.workers == 1

    def test_config_path_from_environment(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("base_url: https://qa.example.com\n")

        settings = Settings.from_env({"BDD_E2E_CONFIG": str(config_file)})
        assert settings.base_url == "https://qa.example.com"

    def test_empty_tags_key_selects_everything(self, tmp_path):
        config_file = tmp_path / "bdd-e2e.yaml"
        config_file.write_text("tags:\n")

        assert Settings.from_env({}, config_file).tags == ""

    def test_empty_keys_keep_defaults(self, tmp_path):
        config_file = tmp_path / "bdd-e2e.yaml"
        config_file.write_text("base_url:\napi_url:\nworkers:\nheadless:\n")

        settings = Settings.from_env({}, config_file)

        assert settings.base_url == "https://example.com"
        assert settings.api_url == "https://api.example.com"
        assert settings.workers == 4
        assert settings.headless == True

    def test_unknown_keys_rejected(self, tmp_path):
        config_file = tmp_path / "bdd-e2e.yaml"
        config_file.write_text("browzer: chromium\n")

        with pytest.raises(ConfigurationError, match="browzer"):
            Settings.from_env({}, config_file)

    def test_non_mapping_rejected(self, tmp_path):
        config_file = tmp_path / "bdd-e2e.yaml"
        config_file.write_text("- chromium\n")

        with pytest.raises(ConfigurationError):
            Settings.from_env({}, config_file)


class TestValidationAndProfiles:
    """Test validate() and run profiles"""

    def test_validate_accepts_supported_browsers(self):
        for browser in ("chromium", "firefox", "webkit"):
            Settings(browser=browser).validate()

    def test_validate_rejects_unknown_browser(self):
        with pytest.raises(ConfigurationError, match="Unsupported browser"):
            Settings(browser="safari").validate()

    def test_validate_rejects_bad_counts(self):
        with pytest.raises(ConfigurationError):
            Settings(workers=0).validate()
        with pytest.raises(ConfigurationError):
            Settings(retries=-1).validate()

    def test_profiles(self):
        settings = Settings(tags="@smoke", workers=4)

        assert apply_profile(settings, "default") == settings
        assert apply_profile(settings, "regression").tags == "@regression"
        assert apply_profile(settings, "smoke").tags == "@smoke"
        assert apply_profile(settings, "ci").workers == 1
        assert set(PROFILES) == {"default", "smoke", "regression", "ci"}

    def test_unknown_profile(self):
        with pytest.raises(ConfigurationError):
            apply_profile(Settings(), "nightly")
