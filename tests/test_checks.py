"""
Tests du pipeline de validation des réponses.
"""

from locale_sync.checks import (
    EchoCheck,
    LineCountCheck,
    PlaceholderCheck,
    ValidationContext,
    ValidationPipeline,
)


def make_context(source_texts, response, translations):
    request = "\n".join(f"{i}. {t}" for i, t in enumerate(source_texts, start=1))
    return ValidationContext(
        source_texts=source_texts,
        request=request,
        response=response,
        translations=translations,
        source_lang="zh-CN",
        target_lang="en-US",
    )


class TestEchoCheck:
    def test_echo_is_rejected(self):
        context = make_context(["你好", "再见"], "1. 你好\n2. 再见\n", ["你好", "再见"])
        result = EchoCheck().validate(context)

        assert not result.is_valid
        assert result.check_name == "echo"

    def test_translation_is_accepted(self):
        context = make_context(["你好"], "1. Hello", ["Hello"])
        assert EchoCheck().validate(context).is_valid


class TestLineCountCheck:
    def test_missing_and_empty_lines(self):
        context = make_context(["一", "二", "三"], "1. One\n3. ", ["One", None, ""])
        result = LineCountCheck().validate(context)

        assert not result.is_valid
        positions = [error["position"] for error in result.error_data["errors"]]
        assert positions == [1, 2]

    def test_all_lines_present(self):
        context = make_context(["一", "二"], "1. One\n2. Two", ["One", "Two"])
        assert LineCountCheck().validate(context).is_valid


class TestPlaceholderCheck:
    def test_lost_placeholder(self):
        context = make_context(
            ["{{x}}开始时间必须大于等于{slot0}"],
            "1. Start time must be >= {slot}",
            ["Start time must be >= {slot}"],
        )
        result = PlaceholderCheck().validate(context)

        assert not result.is_valid
        error = result.error_data["errors"][0]
        assert error["missing_placeholders"] == ["{{x}}", "{slot0}"]

    def test_kept_placeholders(self):
        context = make_context(
            ["{{x}}开始时间必须大于等于{slot0}"],
            "1. {{x}} Start time must be greater than or equal to {slot0}",
            ["{{x}} Start time must be greater than or equal to {slot0}"],
        )
        assert PlaceholderCheck().validate(context).is_valid


class TestValidationPipeline:
    def test_first_failure_is_returned(self):
        """L'écho est détecté avant le contrôle des placeholders."""
        context = make_context(["等于{slot0}"], "1. 等于{slot0}", ["等于{slot0}"])
        result = ValidationPipeline.for_batch().run(context)

        assert not result.is_valid
        assert result.check_name == "echo"

    def test_single_pipeline_skips_echo(self):
        context = ValidationContext(
            source_texts=["OK"], request="OK", response="OK", translations=["OK"]
        )
        assert ValidationPipeline.for_single().run(context).is_valid

    def test_valid_response(self):
        context = make_context(["你好"], "1. Hello", ["Hello"])
        result = ValidationPipeline.for_batch().run(context)

        assert result.is_valid
        assert result.check_name == "pipeline"
