from jsonldcore.namer import UniqueNamer


class TestUniqueNamer:
    def test_fresh_names_count_up(self):
        namer = UniqueNamer('_:b')
        assert namer.get_name() == '_:b0'
        assert namer.get_name() == '_:b1'

    def test_same_old_name_same_new_name(self):
        namer = UniqueNamer('_:c14n')
        assert namer.get_name('_:x') == '_:c14n0'
        assert namer.get_name('_:y') == '_:c14n1'
        assert namer.get_name('_:x') == '_:c14n0'
        assert namer.order == ['_:x', '_:y']

    def test_is_named(self):
        namer = UniqueNamer('_:b')
        namer.get_name('_:x')
        assert namer.is_named('_:x')
        assert not namer.is_named('_:y')

    def test_unnamed_requests_are_not_recorded(self):
        namer = UniqueNamer('_:b')
        namer.get_name()
        assert namer.existing == {}
        assert namer.get_name('_:x') == '_:b1'

    def test_clone_is_independent(self):
        namer = UniqueNamer('_:b')
        namer.get_name('_:x')
        clone = namer.clone()
        clone.get_name('_:y')
        assert not namer.is_named('_:y')
        assert namer.counter == 1
        assert clone.get_name('_:x') == '_:b0'
