import unittest

from iocbind import Container


class StatService:
    def stat(self) -> str:
        raise NotImplementedError


class UserPostViewsStatService(StatService):
    def stat(self) -> str:
        return "user post views"


class PageViewsStatService(StatService):
    def stat(self) -> str:
        return "page views"


def new_user_post_views_stat_service() -> UserPostViewsStatService:
    return UserPostViewsStatService()


def new_page_views_stat_service() -> PageViewsStatService:
    return PageViewsStatService()


class TestTagged(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.cont.bind(new_user_post_views_stat_service)
        self.cont.bind(new_page_views_stat_service)

    def test_tagged_resolves_in_tagging_order(self):
        assert self.cont.tag("StatServices", UserPostViewsStatService, PageViewsStatService)

        services = self.cont.tagged("StatServices")

        assert [s.stat() for s in services] == ["user post views", "page views"]

    def test_tagging_twice_does_not_duplicate(self):
        self.cont.tag("StatServices", UserPostViewsStatService)
        self.cont.tag("StatServices", PageViewsStatService, UserPostViewsStatService)

        services = self.cont.tagged("StatServices")

        assert [type(s) for s in services] == [UserPostViewsStatService, PageViewsStatService]

    def test_tag_accepts_factories_and_instances(self):
        assert self.cont.tag("StatServices", new_page_views_stat_service, UserPostViewsStatService())

        services = self.cont.tagged("StatServices")

        assert [type(s) for s in services] == [PageViewsStatService, UserPostViewsStatService]

    def test_unbound_types_are_skipped(self):
        class NotBound: ...

        assert self.cont.tag("StatServices", NotBound, PageViewsStatService)
        assert [type(s) for s in self.cont.tagged("StatServices")] == [PageViewsStatService]

    def test_tag_with_only_unbound_types_fails(self):
        class NotBound: ...

        assert not self.cont.tag("Nothing", NotBound)
        assert self.cont.tagged("Nothing") == []

    def test_tag_without_bindings_fails(self):
        assert not self.cont.tag("Empty")

    def test_unknown_tag_resolves_to_empty_list(self):
        assert self.cont.tagged("Unknown") == []

    def test_tagged_instances_are_new_each_time(self):
        self.cont.tag("StatServices", PageViewsStatService)

        first = self.cont.tagged("StatServices")[0]
        second = self.cont.tagged("StatServices")[0]

        assert first is not second


def test_tag_resolves_bindings_from_parent():
    parent = Container()
    parent.bind(new_page_views_stat_service)
    child = parent.create_child_container()

    assert child.tag("StatServices", PageViewsStatService)
    assert [type(s) for s in child.tagged("StatServices")] == [PageViewsStatService]
    assert parent.tagged("StatServices") == []
