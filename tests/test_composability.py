import pytest
from lazyseq import values, count


class TestComposability:
    """Test operation composability and method chaining"""

    def test_method_chaining(self):
        """Test that methods can be chained together"""
        result = (
            values(range(20))
            .map(lambda x: x * 2)
            .filter(lambda x: x > 10)
            .drop(3)
            .take(5)
            .to_list()
        )

        expected = [18, 20, 22, 24, 26]
        assert result == expected, f"Expected {expected}, got {result}"

    def test_multiple_maps(self):
        """Test composing multiple map operations"""
        result = (
            values([1, 2, 3, 4, 5])
            .map(lambda x: x * 2)
            .map(lambda x: x + 1)
            .map(lambda x: x * 3)
            .to_list()
        )

        expected = [9, 15, 21, 27, 33]  # ((x*2)+1)*3
        assert result == expected, f"Expected {expected}, got {result}"

    def test_multiple_filters(self):
        """Test composing multiple filter operations"""
        result = (
            values(range(20))
            .filter(lambda x: x % 2 == 0)
            .filter(lambda x: x % 3 == 0)
            .filter(lambda x: x > 5)
            .to_list()
        )

        expected = [6, 12, 18]
        assert result == expected, f"Expected {expected}, got {result}"

    def test_drop_and_take_composition(self):
        """Test composing drop and take operations"""
        result = (
            values(range(20))
            .drop(5)
            .take(10)
            .drop(2)
            .take(5)
            .to_list()
        )

        # drop 5, take 10: [5..14]; drop 2, take 5: [7..11]
        expected = [7, 8, 9, 10, 11]
        assert result == expected, f"Expected {expected}, got {result}"

    def test_infinite_source_composition(self):
        """Test that bounded pipelines over infinite sources terminate"""
        result = (
            count(1)
            .map(lambda x: x * x)
            .filter(lambda x: x % 2 == 1)
            .take_while(lambda x: x < 100)
            .to_list()
        )

        expected = [1, 9, 25, 49, 81]
        assert result == expected, f"Expected {expected}, got {result}"

    def test_composability_with_empty_results(self):
        """Test composability when intermediate operations produce empty results"""
        calls = []
        result = (
            values([1, 2, 3, 4, 5])
            .filter(lambda x: x > 10)
            .map(lambda x: calls.append(x) or x * 2)
            .take(3)
            .to_list()
        )

        assert result == [], f"Expected empty list, got {result}"
        assert calls == [], "Map should never be called"

    def test_push_and_pull_paths_agree(self):
        """Test that driving and iterating the same pipeline give the same elements"""
        seq = (
            values(range(30))
            .drop_while(lambda x: x < 4)
            .filter(lambda x: x % 3 != 0)
            .enumerate()
            .take(6)
        )

        assert seq.to_list() == list(seq), "drive() and iteration disagree"

    def test_operation_order_matters(self):
        """Test that the order of operations affects the result"""
        data = range(10)

        result1 = values(data).filter(lambda x: x > 5).map(lambda x: x * 2).to_list()
        result2 = values(data).map(lambda x: x * 2).filter(lambda x: x > 5).to_list()

        assert result1 != result2, "Different operation orders should yield different results"
        assert result1 == [12, 14, 16, 18], f"Result1 unexpected: {result1}"
        assert result2 == [6, 8, 10, 12, 14, 16, 18], f"Result2 unexpected: {result2}"
