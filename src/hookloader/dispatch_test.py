import unittest
from unittest.mock import Mock, call

from hamcrest import assert_that, is_, calling, raises

from hookloader.dispatch import ConnectionDispatcher, bind
from hookloader.server import ConnectionServer


class ConnectionDispatcherTest(unittest.TestCase):
    def setUp(self):
        self.server = Mock()
        self.calls = []

    def recorder(self, name):
        def handler(*args):
            self.calls.append((name,) + args)
        return handler

    def test_calls_handlers_in_order_with_server_and_connection(self):
        sut = ConnectionDispatcher(self.server, [self.recorder('a'), self.recorder('b')], [])
        sut('conn')
        assert_that(self.calls, is_([('a', self.server, 'conn'), ('b', self.server, 'conn')]))

    def test_passes_extra_arguments(self):
        sut = ConnectionDispatcher(self.server, [self.recorder('a')], [1, 2, 3])
        sut('conn')
        assert_that(self.calls, is_([('a', self.server, 'conn', 1, 2, 3)]))

    def test_extra_arguments_read_on_each_connection(self):
        extra = [1]
        sut = ConnectionDispatcher(self.server, [self.recorder('a')], extra)
        sut('c1')
        extra.append(2)
        sut('c2')
        assert_that(self.calls, is_([('a', self.server, 'c1', 1), ('a', self.server, 'c2', 1, 2)]))

    def test_handler_list_is_a_snapshot(self):
        handlers = [self.recorder('a')]
        sut = ConnectionDispatcher(self.server, handlers, [])
        handlers.append(self.recorder('b'))
        sut('conn')
        assert_that(len(sut), is_(1))
        assert_that(self.calls, is_([('a', self.server, 'conn')]))

    def test_failure_propagates_and_stops_remaining_handlers(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        sut = ConnectionDispatcher(self.server, [failing, after], [])
        assert_that(calling(sut).with_args('conn'), raises(RuntimeError, "boom"))
        after.assert_not_called()

    def test_isolated_failure_is_logged(self):
        log = Mock()
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        sut = ConnectionDispatcher(self.server, [failing, after], ['x'], isolate=True, log=log)
        sut('conn')
        after.assert_called_once_with(self.server, 'conn', 'x')
        assert_that(log.exception.call_count, is_(1))


class BindTest(unittest.TestCase):
    def test_registers_with_connection_events(self):
        server = Mock()
        dispatcher = ConnectionDispatcher(server, [], [])
        assert_that(bind(server, dispatcher), is_(dispatcher))
        server.connection_events.add.assert_called_once_with(dispatcher)

    def test_server_without_connection_events(self):
        dispatcher = ConnectionDispatcher(object(), [], [])
        assert_that(calling(bind).with_args(object(), dispatcher), raises(TypeError, "no connection_events"))

    def test_fired_by_server(self):
        server = ConnectionServer()
        handler = Mock()
        bind(server, ConnectionDispatcher(server, [handler], ['extra']))
        server.connected('conn')
        handler.assert_has_calls([call(server, 'conn', 'extra')])


if __name__ == '__main__':  # pragma no cover
    unittest.main()
