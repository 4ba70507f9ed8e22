from fencequote.money import multiply_cents, percent_of, to_cents, to_dollars


def test_to_cents_rounds_half_up():
    assert to_cents(0.1) == 10
    assert to_cents(1.005) == 101
    assert to_cents(2.675) == 268
    assert to_cents(-1.005) == -101
    assert to_cents(45) == 4500


def test_multiply_and_percent():
    assert multiply_cents(15.000000000000002, 4500) == 67500
    assert multiply_cents(1.5, 4500) == 6750
    assert multiply_cents(3, 379) == 1137
    assert percent_of(219900, 15) == 32985
    assert percent_of(263880, 8.0) == 21110
    assert percent_of(1, 50) == 1


def test_to_dollars():
    assert to_dollars(74250) == 742.5
    assert to_dollars(0) == 0.0
