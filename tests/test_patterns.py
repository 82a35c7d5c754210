from rapport.linguistics.patterns import HorsemenCounts, detect_four_horsemen, detect_repair_attempts


class TestFourHorsemen:
    def test_absolutist_scenario(self):
        counts = detect_four_horsemen("You always do this. You never listen. Whatever, I don't care.")
        assert counts.criticism == 2
        assert counts.contempt == 1
        assert counts.defensiveness == 0
        assert counts.stonewalling == 2
        assert counts.total == 5

    def test_overlapping_phrase_counts_in_each_list(self):
        counts = detect_four_horsemen("whatever")
        assert counts.contempt == 1
        assert counts.stonewalling == 1

    def test_curly_apostrophes(self):
        assert detect_four_horsemen("It’s not my fault").defensiveness == 1

    def test_bare_ok_line_is_stonewalling(self):
        assert detect_four_horsemen("I explained it twice.\nok.\n").stonewalling == 1

    def test_empty(self):
        assert detect_four_horsemen("") == HorsemenCounts()
        assert detect_four_horsemen(None) == HorsemenCounts()

    def test_present_and_add(self):
        a = HorsemenCounts(criticism=1)
        b = HorsemenCounts(criticism=1, stonewalling=2)
        total = a + b
        assert total == HorsemenCounts(criticism=2, stonewalling=2)
        assert total.present() == ["criticism", "stonewalling"]


class TestRepairAttempts:
    def test_thank_you_scenario(self):
        assert detect_repair_attempts("Thank you for listening. I appreciate it. I'm sorry for yesterday.") == 3

    def test_each_occurrence_counts(self):
        assert detect_repair_attempts("I'm sorry. I'm sorry. Please.") == 3

    def test_none(self):
        assert detect_repair_attempts("We went to the store.") == 0
        assert detect_repair_attempts("") == 0
