import pytest

from mealrotation import ConfigError, PlannerSettings, load_settings


def test_defaults_when_no_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_settings()
    assert settings == PlannerSettings()
    assert settings.planning_mode == "meals"
    assert settings.complexity_thresholds.complex_above == 45.0


def test_missing_explicit_path_falls_back(tmp_path):
    settings = load_settings(str(tmp_path / "nope.yaml"))
    assert settings == PlannerSettings()


def test_weights_normalize_to_one():
    normalized = PlannerSettings().weights.normalized()
    assert sum(normalized.values()) == pytest.approx(1.0)
    assert set(normalized) == {"availability", "complexity", "advance_prep", "freshness", "equipment"}


def test_load_from_yaml(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text(
        "planning_mode: Courses\n"
        "minimum_recipes: 5\n"
        "weights:\n"
        "  availability: 2\n"
        "complexity_thresholds:\n"
        "  complex_above: 60\n",
        encoding="utf-8",
    )
    settings = load_settings(str(path))

    assert settings.planning_mode == "courses"
    assert settings.minimum_recipes == 5
    assert settings.weights.availability == 2.0
    assert settings.weights.advance_prep == 0.3
    assert settings.complexity_thresholds.complex_above == 60.0
    assert settings.complexity_thresholds.simple_below == 20.0


def test_picks_up_planner_yaml_in_cwd(tmp_path, monkeypatch):
    (tmp_path / "planner.yaml").write_text("minimum_recipes: 3\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_settings().minimum_recipes == 3


@pytest.mark.parametrize(
    "text",
    [
        "weights:\n  availability: -1\n",
        "weights: {availability: 0, complexity: 0, advance_prep: 0, freshness: 0, equipment: 0}\n",
        "planning_mode: brunch\n",
        "minimum_recipes: 0\n",
        "complexity_thresholds:\n  simple_below: 50\n  complex_above: 40\n",
        "minimum_recipes: lots\n",
        "cuisine_variety_weight: 1.5\n",
        "- just\n- a list\n",
        "weights: [unclosed\n",
    ],
)
def test_bad_settings_raise(tmp_path, text):
    path = tmp_path / "planner.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(path))
