import unittest

from iocbind import Container


class DB: ...


class AnotherDB(DB): ...


class TestResolutionPrecedence(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_provided_parameter_beats_container_binding(self):
        class Repo:
            def __init__(self, db: DB):
                self.db = db

        self.cont.singleton(DB)
        self.cont.bind(Repo)
        provided = DB()

        obj = self.cont.make(Repo, provided)

        assert obj.db is provided

    def test_provided_parameter_must_match_type_exactly(self):
        class Repo:
            def __init__(self, db: DB):
                self.db = db

        self.cont.bind(DB)
        self.cont.bind(Repo)

        # a subclass instance is not an exact match, so the container builds the DB
        obj = self.cont.make(Repo, AnotherDB())

        assert type(obj.db) is DB

    def test_keyword_override_beats_provided_parameter(self):
        class Repo:
            def __init__(self, db: DB):
                self.db = db

        self.cont.bind(Repo)
        override_db = DB()

        obj = self.cont.make(Repo, DB(), db=override_db)

        assert obj.db is override_db

    def test_keyword_override_fills_unannotated_parameter(self):
        class Repo:
            def __init__(self, db):
                self.db = db

        self.cont.bind(Repo)
        override_db = DB()

        obj = self.cont.make(Repo, db=override_db)

        assert obj.db is override_db

    def test_unannotated_parameter_accepts_any_provided_value(self):
        class Repo:
            def __init__(self, db):
                self.db = db

        self.cont.bind(Repo)

        obj = self.cont.make(Repo, "anything")

        assert obj.db == "anything"

    def test_container_binding_beats_default_value(self):
        class WithDefault:
            def __init__(self, port: int = 5555):
                self.port = port

        self.cont.instance(1234)
        self.cont.bind(WithDefault)

        assert self.cont.make(WithDefault).port == 1234

    def test_default_value_beats_zero_value(self):
        class WithDefault:
            def __init__(self, port: int = 5555):
                self.port = port

        self.cont.bind(WithDefault)

        assert self.cont.make(WithDefault).port == 5555

    def test_extra_provided_parameters_are_ignored(self):
        class Single:
            def __init__(self, port: int):
                self.port = port

        self.cont.bind(Single)

        assert self.cont.make(Single, 1, 2, 3).port == 1
