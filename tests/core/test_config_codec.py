"""Tests for the cargo config model and TOML codec."""

import tomllib

import pytest

from quickchange.core.config import (
    MAX_CONFIG_SIZE,
    BuildConfig,
    CargoConfig,
    EnvObject,
    HttpConfig,
    NetConfig,
    SourceEntry,
    import_config,
    load_config,
    parse_config,
    save_config,
    serialize_config,
)
from quickchange.core.exceptions import ConfigError, ConfigNotFoundError, ConfigParseError


class TestParseConfig:
    """Tests for parse_config."""

    def test_blank_text_is_empty_document(self):
        """Empty and whitespace-only text parse to an empty document."""
        assert parse_config("") == CargoConfig()
        assert parse_config("  \n\t\n") == CargoConfig()

    def test_known_fields_by_hyphenated_name(self, sample_text):
        """Hyphenated TOML keys populate the snake_case fields."""
        config = parse_config(sample_text)
        assert config.source["crates-io"].replace_with == "ustc"
        assert config.net.git_fetch_with_cli is True
        assert config.build.jobs == 4

    def test_flexible_value_types_kept(self):
        """Union fields keep the type found in the file."""
        config = parse_config('[profile.release]\nopt-level = "s"\ndebug = 2\nlto = true\n')
        profile = config.profile["release"]
        assert profile.opt_level == "s"
        assert profile.debug == 2
        assert profile.lto is True

    def test_env_string_and_table_forms(self):
        """[env] entries accept both plain strings and tables."""
        config = parse_config('[env]\nA = "1"\nB = { value = "2", force = true }\n')
        assert config.env["A"] == "1"
        assert isinstance(config.env["B"], EnvObject)
        assert config.env["B"].force is True

    def test_malformed_toml(self):
        """Invalid TOML raises ConfigParseError naming the source."""
        with pytest.raises(ConfigParseError, match="broken.toml"):
            parse_config("[net\noffline = true", "broken.toml")

    def test_wrong_value_type(self):
        """A value that does not fit the model raises ConfigParseError."""
        with pytest.raises(ConfigParseError, match="net.offline"):
            parse_config('[net]\noffline = "maybe"\n')


class TestRoundTrip:
    """Unknown keys must survive parse -> serialize."""

    def test_sample_round_trip(self, sample_text):
        """Serialized sample parses back to the same data."""
        text = serialize_config(parse_config(sample_text))
        assert tomllib.loads(text) == tomllib.loads(sample_text)

    def test_unknown_top_level_section(self):
        """Unknown top-level tables are kept."""
        text = serialize_config(parse_config("[unstable]\ngc = true\n"))
        assert tomllib.loads(text) == {"unstable": {"gc": True}}

    def test_unknown_key_inside_known_section(self):
        """Unknown keys inside a known section are kept."""
        original = '[http]\ntimeout = 30\nssl-version = "tlsv1.3"\n'
        data = tomllib.loads(serialize_config(parse_config(original)))
        assert data == {"http": {"timeout": 30, "ssl-version": "tlsv1.3"}}

    def test_unknown_key_in_keyed_entry(self):
        """Unknown keys inside keyed entries such as [source.x] are kept."""
        original = '[source.mine]\nregistry = "https://example.com/index"\nprotocol = "sparse"\n'
        data = tomllib.loads(serialize_config(parse_config(original)))
        assert data["source"]["mine"]["protocol"] == "sparse"

    def test_empty_document_serializes_to_empty_text(self):
        """Nothing set means nothing written."""
        assert serialize_config(CargoConfig()) == ""


class TestModelConstruction:
    """Building documents in code with Python field names."""

    def test_python_names_serialize_hyphenated(self):
        """replace_with and git_fetch_with_cli are written under their TOML keys."""
        config = CargoConfig(
            source={"crates-io": SourceEntry(replace_with="ustc")},
            net=NetConfig(git_fetch_with_cli=True),
        )
        assert config.source["crates-io"].replace_with == "ustc"
        assert config.net.git_fetch_with_cli is True

        data = tomllib.loads(serialize_config(config))

        assert data == {
            "source": {"crates-io": {"replace-with": "ustc"}},
            "net": {"git-fetch-with-cli": True},
        }

    def test_toml_key_still_accepted(self):
        """Keyword construction by the hyphenated key keeps working."""
        entry = SourceEntry(**{"replace-with": "ustc"})
        assert entry.replace_with == "ustc"
        assert entry.model_extra == {}

    def test_underscore_key_in_file_stays_unknown(self):
        """An underscore spelling read from a file is kept verbatim, not renamed."""
        config = parse_config("[net]\ngit_fetch_with_cli = true\n")
        assert config.net.git_fetch_with_cli is None

        data = tomllib.loads(serialize_config(config))

        assert data == {"net": {"git_fetch_with_cli": True}}


class TestEmptyValues:
    """Known fields holding empty values are not written."""

    def test_empty_string_and_empty_section_dropped(self):
        """An empty proxy leaves no [http] table behind."""
        config = CargoConfig(http=HttpConfig(proxy=""), build=BuildConfig(rustflags=[]))
        assert serialize_config(config) == ""

    def test_empty_items_filtered_from_arrays(self):
        """Blank array items are removed and the rest kept in order."""
        config = CargoConfig(build=BuildConfig(rustflags=["-C", "", "opt-level=3"]))
        data = tomllib.loads(serialize_config(config))
        assert data == {"build": {"rustflags": ["-C", "opt-level=3"]}}

    def test_empty_keyed_entries_dropped(self):
        """Entries and tables left empty disappear up to the top level."""
        config = CargoConfig(source={"crates-io": SourceEntry(replace_with="")}, alias={})
        assert serialize_config(config) == ""

    def test_false_and_zero_kept(self):
        """Falsy values that are not empty survive."""
        config = CargoConfig(net=NetConfig(offline=False, retry=0))
        data = tomllib.loads(serialize_config(config))
        assert data == {"net": {"offline": False, "retry": 0}}

    def test_unknown_empty_values_kept(self):
        """Unknown keys round-trip even when empty."""
        original = '[http]\nssl-version = ""\n\n[unstable]\n'
        data = tomllib.loads(serialize_config(parse_config(original)))
        assert data == {"http": {"ssl-version": ""}, "unstable": {}}


class TestLoadSave:
    """Tests for load_config, save_config and import_config."""

    def test_missing_file_is_empty(self, config_path):
        """A missing file loads as an empty document without creating it."""
        assert load_config(config_path) == CargoConfig()
        assert not config_path.exists()

    def test_create_missing(self, config_path):
        """create_missing creates the parent directory and an empty file."""
        assert load_config(config_path, create_missing=True) == CargoConfig()
        assert config_path.is_file()
        assert config_path.read_text(encoding="utf-8") == ""

    def test_blank_file(self, config_path):
        """An existing blank file is an empty document."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("\n\n", encoding="utf-8")
        assert load_config(config_path) == CargoConfig()

    def test_directory_instead_of_file(self, config_path):
        """A directory at the config path is a ConfigError."""
        config_path.mkdir(parents=True)
        with pytest.raises(ConfigError):
            load_config(config_path)

    def test_oversized_file(self, config_path):
        """Files over the size limit are refused."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("#" * (MAX_CONFIG_SIZE + 10), encoding="utf-8")
        with pytest.raises(ConfigError, match="1MB"):
            load_config(config_path)

    def test_save_then_load(self, config_path):
        """A saved document loads back equal."""
        config = CargoConfig(net=NetConfig(offline=True))
        save_config(config, config_path)
        assert load_config(config_path) == config
        assert "offline = true" in config_path.read_text(encoding="utf-8")

    def test_edit_keeps_unknown_keys(self, sample_config):
        """Editing a known field leaves unknown keys on disk."""
        config = load_config(sample_config)
        config.net.offline = True
        save_config(config, sample_config)

        data = tomllib.loads(sample_config.read_text(encoding="utf-8"))
        assert data["unstable"] == {"gc": True}
        assert data["net"] == {"git-fetch-with-cli": True, "offline": True}

    def test_import_missing(self, tmp_path):
        """Importing a missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            import_config(tmp_path / "nope.toml")

    def test_import_existing(self, sample_config):
        """Importing parses the file."""
        assert import_config(sample_config).build.jobs == 4
