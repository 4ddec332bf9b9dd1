import numpy as np
import pandas as pd
import pytest
import yaml

from spectro_slice.engine.errors import SliceError
from spectro_slice.engine.pipeline import slice_xvalues_with_recipe
from spectro_slice.engine.recipe_model import SliceRecipe


def test_recipe_validation_passes_for_reasonable_recipe():
    recipe = SliceRecipe(
        xvalues_cut=[[1500, 1024], [1004, 998]],
        parallel={"enabled": True, "workers": 2},
    )
    assert recipe.validate() == []


def test_recipe_validation_allows_missing_ranges():
    assert SliceRecipe().validate() == []


def test_recipe_validation_flags_columns_ranges_and_workers():
    recipe = SliceRecipe(
        xunit_lcol="",
        spc_lcol=None,
        xvalues_cut=[[1500, "not-a-number"]],
        parallel={"workers": 0},
    )
    errs = recipe.validate()
    assert "X-axis column name must be a non-empty string" in errs
    assert "Spectrum column name must be a non-empty string" in errs
    assert any("Cut ranges are invalid" in err for err in errs)
    assert "Parallel workers must be at least 1" in errs


def test_recipe_validation_flags_non_integer_workers():
    errs = SliceRecipe(parallel={"workers": "four"}).validate()
    assert errs == ["Parallel workers must be an integer"]


def test_recipe_round_trips_through_yaml(tmp_path):
    recipe = SliceRecipe(
        xunit_lcol="wavelengths",
        xvalues_cut=[(1500, 1024), (1004, 998)],
        parallel={"enabled": False, "workers": 2},
    )
    path = tmp_path / "slice.yaml"
    recipe.save(path)

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["xvalues_cut"] == [[1500.0, 1024.0], [1004.0, 998.0]]
    assert list(raw)[:3] == ["xunit_lcol", "spc_lcol", "xvalues_cut"]

    loaded = SliceRecipe.load(path)
    assert loaded.xunit_lcol == "wavelengths"
    assert loaded.spc_lcol == "spc"
    assert loaded.parallel == {"enabled": False, "workers": 2}
    assert loaded.xvalues_cut == [[1500.0, 1024.0], [1004.0, 998.0]]


def test_recipe_from_dict_rejects_unknown_keys():
    with pytest.raises(SliceError, match="ranges"):
        SliceRecipe.from_dict({"ranges": [[1, 2]]})


def test_recipe_load_rejects_non_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(SliceError):
        SliceRecipe.load(path)


def test_slice_with_recipe_applies_configured_columns():
    cells = np.empty(1, dtype=object)
    cells[0] = np.array([400.0, 450.0, 500.0, 550.0])
    spectra = np.empty(1, dtype=object)
    spectra[0] = np.array([[0.1, 0.2, 0.3, 0.4]])
    table = pd.DataFrame({"wavelengths": cells, "absorbance": spectra})

    recipe = SliceRecipe(xunit_lcol="wavelengths", spc_lcol="absorbance", xvalues_cut=[450, 500])
    sliced = slice_xvalues_with_recipe(table, recipe)
    np.testing.assert_array_equal(sliced["wavelengths"].iloc[0], [450.0, 500.0])
    np.testing.assert_array_equal(sliced["absorbance"].iloc[0], [[0.2, 0.3]])


def test_slice_with_invalid_recipe_raises():
    table = pd.DataFrame({"wavenumbers": [], "spc": []})
    with pytest.raises(SliceError, match="Cut ranges are invalid"):
        slice_xvalues_with_recipe(table, SliceRecipe(xvalues_cut=[(1, 2, 3)]))


def test_recipe_validation_flags_shared_columns():
    errs = SliceRecipe(xunit_lcol="spc", spc_lcol="spc").validate()
    assert errs == ["X-axis and spectrum columns must be different"]


def test_recipe_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        SliceRecipe.load(tmp_path / "missing.yaml")


def test_recipe_load_malformed_yaml_raises(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("a: [1,", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        SliceRecipe.load(path)
