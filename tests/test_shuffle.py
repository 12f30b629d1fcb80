from utils.shuffle import MODULUS, seeded_random, shuffle


def test_shuffle_is_a_permutation():
    items = list(range(50))
    result = shuffle(items, 987654)
    assert sorted(result) == items
    assert len(result) == len(items)


def test_shuffle_is_deterministic():
    items = [10, 20, 30, 40, 50]
    assert shuffle(items, 123456) == shuffle(items, 123456)


def test_shuffle_empty_and_single_item():
    assert shuffle([], 42) == []
    assert shuffle(["only"], 42) == ["only"]
    assert shuffle(["only"], 0) == ["only"]


def test_shuffle_does_not_mutate_input():
    items = [1, 2, 3, 4, 5, 6]
    shuffle(items, 31337)
    assert items == [1, 2, 3, 4, 5, 6]


def test_shuffle_known_sequence():
    # seed=1: первые состояния генератора 185852 и 181227567, оба дают j=0
    assert seeded_random(1)() == 185852 / MODULUS
    assert shuffle([1, 2, 3], 1) == [2, 3, 1]


def test_seed_is_taken_modulo():
    items = list("abcdefgh")
    assert shuffle(items, 777 + MODULUS) == shuffle(items, 777)


def test_different_seeds_give_different_orders():
    items = list(range(20))
    assert shuffle(items, 123456) != shuffle(items, 654321)


def test_generator_stays_in_unit_interval():
    rng = seeded_random(2024)
    values = [rng() for _ in range(1000)]
    assert all(0 <= value < 1 for value in values)
