"""
Tests for the calculator evaluation engine (parsing, evaluation, gauge).
"""

import math

import pytest

from cgwise.components.calculator import (
    BuiltinCatalog,
    CalculationResult,
    DEFAULT_CALCULATORS,
    CalculatorDefinition,
    EvaluateInput,
    GetCalculatorInput,
    InputField,
    ListCatalogInput,
    OptimalRange,
    ProductFormula,
    RatioFormula,
    ScaleAnnotation,
    SystemFactors,
    SystemScales,
    UnitPair,
    evaluate,
    evaluate_raw,
    gauge_position,
    is_optimal,
    parse_inputs,
    run,
    run_evaluate,
    run_get_calculator,
    run_list_catalog,
    sanitize_numeric_text,
)

# --- Fixtures ---


@pytest.fixture
def circumference() -> CalculatorDefinition:
    return CalculatorDefinition(
        id="circ",
        name="Circumference",
        short_name="C",
        inputs=(InputField(key="d", label="Diameter"),),
        formula=ProductFormula(
            label="Circumference",
            unit=UnitPair(metric="mm", imperial="inch"),
            keys=("d",),
            factor=SystemFactors(metric=math.pi, imperial=math.pi),
        ),
    )


@pytest.fixture
def ratio_calc() -> CalculatorDefinition:
    return CalculatorDefinition(
        id="ratio",
        name="Ratio",
        short_name="R",
        inputs=(InputField(key="a", label="A"), InputField(key="b", label="B")),
        formula=RatioFormula(
            label="A/B",
            unit=UnitPair(metric="ratio", imperial="ratio"),
            numerator="a",
            denominator="b",
        ),
    )


# --- Sanitizing ---


class TestSanitizeNumericText:
    def test_drops_non_numeric_and_second_dot(self) -> None:
        assert sanitize_numeric_text("1,234.5.6 mm") == "1234.5"

    def test_plain_number_unchanged(self) -> None:
        assert sanitize_numeric_text("12.5") == "12.5"

    def test_sign_is_dropped(self) -> None:
        assert sanitize_numeric_text("-5") == "5"

    def test_letters_only(self) -> None:
        assert sanitize_numeric_text("abc") == ""

    def test_trailing_dot_kept(self) -> None:
        assert sanitize_numeric_text("7.") == "7."


class TestParseInputs:
    def test_field_order_and_missing_keys(self, ratio_calc: CalculatorDefinition) -> None:
        parsed = parse_inputs({"b": "4"}, ratio_calc.inputs)
        assert list(parsed) == ["a", "b"]
        assert parsed == {"a": 0.0, "b": 4.0}

    def test_unknown_keys_ignored(self, ratio_calc: CalculatorDefinition) -> None:
        parsed = parse_inputs({"a": "1", "zzz": "9"}, ratio_calc.inputs)
        assert "zzz" not in parsed

    def test_garbage_reads_as_zero(self, ratio_calc: CalculatorDefinition) -> None:
        parsed = parse_inputs({"a": ".", "b": "x"}, ratio_calc.inputs)
        assert parsed == {"a": 0.0, "b": 0.0}

    def test_none_reads_as_zero(self, ratio_calc: CalculatorDefinition) -> None:
        assert parse_inputs({"a": None}, ratio_calc.inputs)["a"] == 0.0


# --- Evaluation ---


class TestEvaluate:
    def test_circumference_metric(self, circumference: CalculatorDefinition) -> None:
        result = evaluate_raw(circumference, {"d": "100"}, "metric")
        assert result.value == pytest.approx(314.159, abs=1e-3)
        assert result.unit.for_system("metric") == "mm"
        assert result.label == "Circumference"

    def test_circumference_imperial_unit(self, circumference: CalculatorDefinition) -> None:
        result = evaluate_raw(circumference, {"d": "2"}, "imperial")
        assert result.value == pytest.approx(2 * math.pi)
        assert result.unit.for_system("imperial") == "inch"

    def test_zero_input_gives_no_value(self, circumference: CalculatorDefinition) -> None:
        result = evaluate_raw(circumference, {"d": "0"}, "metric")
        assert result.value is None
        assert result.label == "Circumference"

    def test_all_empty_gives_no_value(self, circumference: CalculatorDefinition) -> None:
        assert evaluate_raw(circumference, {}, "metric").value is None

    def test_missing_required_gives_no_value(self, ratio_calc: CalculatorDefinition) -> None:
        result = evaluate_raw(ratio_calc, {"a": "12.5", "b": ""}, "metric")
        assert result.value is None
        assert result.scale is None

    def test_division_by_zero_gives_no_value(self) -> None:
        calc = CalculatorDefinition(
            id="inv",
            name="Inverse",
            short_name="I",
            inputs=(InputField(key="x", label="X"), InputField(key="one", label="One")),
            formula=RatioFormula(
                label="1/x",
                unit=UnitPair(metric="1/mm", imperial="1/in"),
                numerator="one",
                denominator="x",
            ),
        )
        assert evaluate(calc, {"one": 1.0, "x": 0.0}, "metric").value is None

    def test_overflow_gives_no_value(self) -> None:
        calc = CalculatorDefinition(
            id="big",
            name="Big",
            short_name="B",
            inputs=(InputField(key="a", label="A"), InputField(key="b", label="B")),
            formula=ProductFormula(
                label="A*B", unit=UnitPair(metric="x", imperial="x"), keys=("a", "b")
            ),
        )
        assert evaluate(calc, {"a": 1e308, "b": 1e10}, "metric").value is None

    def test_idempotent(self, circumference: CalculatorDefinition) -> None:
        first = evaluate_raw(circumference, {"d": "42"}, "metric")
        second = evaluate_raw(circumference, {"d": "42"}, "metric")
        assert first == second

    def test_text_is_sanitized_before_evaluation(self, ratio_calc: CalculatorDefinition) -> None:
        result = evaluate_raw(ratio_calc, {"a": "1,000", "b": "4 mm"}, "metric")
        assert result.value == pytest.approx(250.0)

    def test_non_finite_value_normalized(self) -> None:
        assert CalculationResult(value=float("inf")).value is None
        assert CalculationResult(value=float("nan")).value is None

    @pytest.mark.parametrize("unit_system", ["metric", "imperial"])
    @pytest.mark.parametrize("definition", DEFAULT_CALCULATORS, ids=lambda d: d.id)
    def test_all_zero_matches_empty_inputs(
        self, definition: CalculatorDefinition, unit_system: str
    ) -> None:
        zeros = {f.key: 0.0 for f in definition.inputs}
        assert evaluate(definition, zeros, unit_system) == definition.formula.evaluate(
            {}, unit_system
        )

    def test_one_nonzero_input_passes_real_mapping(self, monkeypatch) -> None:
        definition = CalculatorDefinition(
            id="area",
            name="Area",
            short_name="A",
            inputs=(InputField(key="a", label="A"), InputField(key="b", label="B")),
            formula=ProductFormula(
                label="A", unit=UnitPair(metric="mm²", imperial="in²"), keys=("a", "b")
            ),
        )
        seen: list[dict[str, float]] = []
        original = ProductFormula.evaluate

        def spy(self, inputs, unit_system):
            seen.append(dict(inputs))
            return original(self, inputs, unit_system)

        monkeypatch.setattr(ProductFormula, "evaluate", spy)

        evaluate(definition, {"a": 0.0, "b": 5.0}, "metric")
        assert seen[-1] == {"a": 0.0, "b": 5.0}

        assert evaluate(definition, {"a": 0.0, "b": 0.0}, "metric").value is None
        assert seen[-1] == {}

    def test_optional_zero_input_keeps_result(self) -> None:
        hm = BuiltinCatalog().get("hm")
        assert hm is not None
        inputs = {"ae": 0.02, "qs": 60.0, "ds": 400.0, "dw": 0.0}
        result = evaluate(hm, inputs, "metric")
        assert result.value is not None
        assert result == hm.formula.evaluate(inputs, "metric")


# --- Gauge ---


def _result(value: float | None) -> CalculationResult:
    return CalculationResult(
        label="X",
        value=value,
        unit=UnitPair(metric="u", imperial="u"),
        scale=ScaleAnnotation(min=0, max=100, optimal=OptimalRange(min=40, max=60)),
    )


class TestGauge:
    def test_position_and_band(self) -> None:
        gauge = gauge_position(_result(70))
        assert gauge is not None
        assert gauge.position == pytest.approx(0.70)
        assert gauge.optimal_start == pytest.approx(0.40)
        assert gauge.optimal_end == pytest.approx(0.60)

    def test_position_clamped(self) -> None:
        gauge = gauge_position(_result(250))
        assert gauge is not None
        assert gauge.position == 1.0

    def test_no_value_no_gauge(self) -> None:
        assert gauge_position(_result(None)) is None

    def test_no_scale_no_gauge(self) -> None:
        assert gauge_position(CalculationResult(label="X", value=3.0)) is None

    def test_zero_span_scale(self) -> None:
        result = CalculationResult(
            value=5.0,
            scale=ScaleAnnotation(min=5, max=5, optimal=OptimalRange(min=5, max=5)),
        )
        gauge = gauge_position(result)
        assert gauge is not None
        assert gauge.position == 0.0

    def test_is_optimal(self) -> None:
        assert is_optimal(_result(50)) is True
        assert is_optimal(_result(70)) is False
        assert is_optimal(_result(None)) is None

    def test_scale_follows_unit_system(self) -> None:
        scales = SystemScales(
            metric=ScaleAnnotation(min=0, max=10, optimal=OptimalRange(min=1, max=2))
        )
        assert scales.for_system("metric") is not None
        assert scales.for_system("imperial") is None


# --- Entry Points ---


class TestEntryPoints:
    def test_run_evaluate_builtin(self) -> None:
        out = run_evaluate(
            EvaluateInput(calculator_id="qw", raw_values={"vw": "30", "ae": "0.02"}),
            catalog=BuiltinCatalog(),
        )
        assert out.success
        assert out.result is not None
        assert out.result.value == pytest.approx(10.0)
        assert out.inputs == {"vw": 30.0, "ae": 0.02}

    def test_run_evaluate_unknown_calculator(self) -> None:
        out = run_evaluate(EvaluateInput(calculator_id="nope"), catalog=BuiltinCatalog())
        assert not out.success
        assert out.errors[0].code == "not_found"
        assert out.errors[0].field == "calculator_id"

    def test_run_get_calculator(self) -> None:
        out = run_get_calculator(GetCalculatorInput(calculator_id="hm"), catalog=BuiltinCatalog())
        assert out.calculator is not None
        assert out.calculator.short_name == "Hm"

    def test_list_catalog_filtered_keeps_all_categories(self) -> None:
        out = run_list_catalog(ListCatalogInput(category="Dressing"), catalog=BuiltinCatalog())
        assert [c.id for c in out.calculators] == ["ud", "vd"]
        assert "Coolant" in out.categories
        assert out.categories[0] == "Surface Grinding"

    def test_run_dispatches(self) -> None:
        out = run(ListCatalogInput(), catalog=BuiltinCatalog())
        assert len(out.calculators) == 7  # type: ignore[union-attr]

    def test_run_rejects_unknown_input(self) -> None:
        with pytest.raises(ValueError):
            run("qw", catalog=BuiltinCatalog())  # type: ignore[arg-type]
