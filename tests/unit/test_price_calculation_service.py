"""
Unit tests for the promotion calculator and the price calculation service.
"""

import pytest
from decimal import Decimal

from order_checkout.calculators import BasePriceCalculator, PromotionCalculator
from order_checkout.contracts import PriceCalculator, PromotionMatcher
from order_checkout.dto import PriceResult, PromotionResult
from order_checkout.exceptions import PriceCalculationFailureError, UnsupportedItemTypeError
from order_checkout.promotion import FullReductionMatcher
from order_checkout.services import PriceCalculationService


class RecordingCalculator(PriceCalculator):
    """Adds a fixed delta and records when it ran."""

    def __init__(self, name, priority, log, delta='0.00', supported=True):
        self.name = name
        self._priority = priority
        self.log = log
        self.delta = Decimal(delta)
        self.supported = supported

    @property
    def type(self):
        return self.name

    @property
    def priority(self):
        return self._priority

    def supports(self, context):
        return self.supported

    def calculate(self, context):
        self.log.append((self.name, context.running_price))
        discount = -self.delta if self.delta < 0 else Decimal('0.00')
        return PriceResult(Decimal('0.00'), self.delta, discount)


class ExplodingCalculator(RecordingCalculator):

    def calculate(self, context):
        raise RuntimeError('boom')


class FixedMatcher(PromotionMatcher):

    def __init__(self, name, priority, discount, log):
        self.name = name
        self._priority = priority
        self.discount = Decimal(discount)
        self.log = log

    @property
    def type(self):
        return self.name

    @property
    def priority(self):
        return self._priority

    def supports(self, context):
        return True

    def match(self, context):
        self.log.append(self.name)
        return PromotionResult(
            promotions={self.name: {'type': self.name}},
            discount=self.discount,
            details={self.name: {'saved': self.discount}}
        )


class TestPromotionCalculator:

    def test_type_and_priority(self):
        calculator = PromotionCalculator()
        assert calculator.type == 'promotion'
        assert calculator.priority == 800

    def test_no_matchers_not_supported(self, make_context, make_item):
        assert PromotionCalculator().supports(make_context([make_item(1, '100.00')])) is False

    def test_full_reduction_discount(self, make_context, make_item):
        context = make_context([make_item(1, '120.00')])

        result = PromotionCalculator([FullReductionMatcher()]).calculate(context)

        assert result.discount == Decimal('10.00')
        assert result.final_price == Decimal('-10.00')
        assert result.original_price == Decimal('0.00')
        assert 'full_reduction' in result.detail('promotions')
        assert context.applied_promotions['full_reduction']['applied_amount'] == Decimal('120.00')

    def test_no_match_is_zero(self, make_context, make_item):
        context = make_context([make_item(1, '60.00')])

        result = PromotionCalculator([FullReductionMatcher()]).calculate(context)

        assert result.discount == Decimal('0.00')
        assert result.detail('promotions') == {}
        assert context.applied_promotions == {}

    def test_matchers_run_by_priority_then_registration(self, make_context, make_item):
        log = []
        calculator = PromotionCalculator([
            FixedMatcher('low', 10, '1.00', log),
            FixedMatcher('first_high', 50, '2.00', log),
            FixedMatcher('second_high', 50, '3.00', log),
        ])

        result = calculator.calculate(make_context([make_item(1, '10.00')]))

        assert log == ['first_high', 'second_high', 'low']
        assert result.discount == Decimal('6.00')


class TestPriceCalculationService:

    def test_empty_context_gives_empty_result(self, make_context):
        log = []
        service = PriceCalculationService([RecordingCalculator('a', 1, log)])

        result = service.calculate(make_context([]))

        assert result.final_price == Decimal('0.00')
        assert log == []

    def test_base_and_promotion(self, make_context, make_item):
        service = PriceCalculationService([
            PromotionCalculator([FullReductionMatcher()]),
            BasePriceCalculator(),
        ])
        context = make_context([make_item(1, '60.00'), make_item(2, '60.00')])

        result = service.calculate(context)

        assert result.original_price == Decimal('120.00')
        assert result.discount == Decimal('10.00')
        assert result.final_price == Decimal('110.00')
        assert result.detail('base_total') == Decimal('120.00')

    def test_equal_priority_runs_in_registration_order(self, make_context, make_item):
        for names in (['a', 'b', 'c'], ['c', 'a', 'b'], ['b', 'c', 'a']):
            log = []
            service = PriceCalculationService([RecordingCalculator(name, 500, log) for name in names])

            service.calculate(make_context([make_item(1, '1.00')]))

            assert [entry[0] for entry in log] == names

    def test_higher_priority_runs_first(self, make_context, make_item):
        log = []
        service = PriceCalculationService()
        service.add_calculator(RecordingCalculator('late', 1, log))
        service.add_calculator(RecordingCalculator('early', 900, log))

        service.calculate(make_context([make_item(1, '1.00')]))

        assert [entry[0] for entry in log] == ['early', 'late']
        assert [c.type for c in service.calculators] == ['early', 'late']

    def test_unsupported_calculators_are_skipped(self, make_context, make_item):
        log = []
        service = PriceCalculationService([
            RecordingCalculator('on', 2, log),
            RecordingCalculator('off', 1, log, supported=False),
        ])

        service.calculate(make_context([make_item(1, '1.00')]))

        assert [entry[0] for entry in log] == ['on']

    def test_running_price_is_visible_to_later_calculators(self, make_context, make_item):
        log = []
        service = PriceCalculationService([
            BasePriceCalculator(),
            RecordingCalculator('after_base', 10, log, delta='-5.00'),
            RecordingCalculator('last', 1, log),
        ])

        service.calculate(make_context([make_item(1, '40.00')]))

        assert log == [('after_base', Decimal('40.00')), ('last', Decimal('35.00'))]

    def test_final_price_never_negative(self, make_context, make_item):
        service = PriceCalculationService([
            BasePriceCalculator(),
            RecordingCalculator('huge_discount', 10, [], delta='-500.00'),
        ])

        result = service.calculate(make_context([make_item(1, '20.00')]))

        assert result.final_price == Decimal('0.00')
        assert result.discount == Decimal('500.00')
        assert result.original_price == Decimal('20.00')

    def test_unexpected_failure_is_wrapped(self, make_context, make_item):
        service = PriceCalculationService([ExplodingCalculator('broken', 1, [])])

        with pytest.raises(PriceCalculationFailureError) as exc:
            service.calculate(make_context([make_item(1, '1.00')]))

        assert exc.value.status_code == 500
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_checkout_errors_propagate_unchanged(self, make_context):
        service = PriceCalculationService([BasePriceCalculator()])

        with pytest.raises(UnsupportedItemTypeError):
            service.calculate(make_context([object()]))

    def test_get_calculator_by_type(self):
        base = BasePriceCalculator()
        service = PriceCalculationService([base, PromotionCalculator()])

        assert service.get_calculator_by_type('base_price') is base
        assert service.get_calculator_by_type('missing') is None
