import unittest
from collections import OrderedDict
from unittest.mock import Mock, call

from hamcrest import assert_that, is_, calling, raises, instance_of, empty, contains_exactly

from hookloader.handlers import normalize_exports, normalize_export, FunctionHandler, ConnectionHandler, \
    HandlerExportError, Handler, qualified_name
from hookloader.modules import LoaderError


class Counter:
    """ a class export that keeps state between connections """
    instances = 0

    def __init__(self):
        Counter.instances += 1
        self.seen = []

    def connection(self, server, conn, *extra):
        self.seen.append((server, conn, extra))


class NoConnection:
    def other(self, server, conn):
        pass  # pragma: no cover


class NotCallableConnection:
    connection = 'nope'


class FailingConstructor:
    def __init__(self):
        raise ValueError("cannot build")


class NormalizeExportTest(unittest.TestCase):
    def setUp(self):
        self.log = Mock()
        Counter.instances = 0

    def test_function_used_unchanged(self):
        fn = Mock()
        handler = normalize_export('greet', fn, self.log)
        assert_that(handler, instance_of(FunctionHandler))
        assert_that(handler.kind, is_('function'))
        assert_that(handler.target, is_(fn))
        handler('server', 'conn', 1, 2)
        fn.assert_called_once_with('server', 'conn', 1, 2)

    def test_class_instantiated_once(self):
        handler = normalize_export('Counter', Counter, self.log)
        assert_that(handler, instance_of(ConnectionHandler))
        assert_that(handler.kind, is_('connection'))
        assert_that(Counter.instances, is_(1))
        handler('server', 'c1')
        handler('server', 'c2', 'x')
        assert_that(Counter.instances, is_(1))
        assert_that(handler.target.seen, is_([('server', 'c1', ()), ('server', 'c2', ('x',))]))

    def test_class_without_connection_is_excluded(self):
        assert_that(normalize_export('NoConnection', NoConnection, self.log), is_(None))
        self.log.assert_called_once_with("cannot load route: NoConnection has no connection method", 'error')

    def test_class_with_non_callable_connection_is_excluded(self):
        assert_that(normalize_export('NotCallableConnection', NotCallableConnection, self.log), is_(None))

    def test_not_callable(self):
        assert_that(calling(normalize_export).with_args('LIMIT', 10, self.log, 'routes/chat'),
                    raises(HandlerExportError, "module requires a function export: routes/chat.LIMIT"))

    def test_constructor_failure(self):
        try:
            normalize_export('FailingConstructor', FailingConstructor, self.log)
            self.fail("expected HandlerExportError")
        except HandlerExportError as e:
            assert_that(str(e), is_("cannot instantiate FailingConstructor: cannot build"))
            assert_that(e.__cause__, instance_of(ValueError))
            assert_that(e, instance_of(LoaderError))

    def test_namespace_qualifies_name(self):
        handler = normalize_export('greet', Mock(), self.log, 'routes/chat')
        assert_that(handler.name, is_('routes/chat.greet'))
        assert_that(repr(handler), is_('<FunctionHandler routes/chat.greet>'))


class NormalizeExportsTest(unittest.TestCase):
    def setUp(self):
        self.log = Mock()

    def test_preserves_export_order(self):
        a = Mock()
        b = Mock()
        handlers = normalize_exports(OrderedDict([('b', b), ('Counter', Counter), ('a', a)]), self.log)
        assert_that([h.name for h in handlers], is_(['b', 'Counter', 'a']))
        assert_that([h.kind for h in handlers], is_(['function', 'connection', 'function']))

    def test_logs_each_loaded_handler(self):
        normalize_exports(OrderedDict([('a', Mock()), ('b', Mock())]), self.log, source='chat.py')
        self.log.assert_has_calls([call("loaded: chat.py"), call("loaded: chat.py")])

    def test_excluded_class_is_not_in_list(self):
        fn = Mock()
        handlers = normalize_exports(OrderedDict([('NoConnection', NoConnection), ('fn', fn)]), self.log)
        assert_that(handlers, contains_exactly(instance_of(FunctionHandler)))
        handlers[0]('s', 'c')
        fn.assert_called_once_with('s', 'c')

    def test_empty_exports(self):
        assert_that(normalize_exports({}, self.log), is_(empty()))

    def test_non_callable_stops_normalization(self):
        exports = OrderedDict([('a', Mock()), ('LIMIT', 3)])
        assert_that(calling(normalize_exports).with_args(exports, self.log), raises(HandlerExportError))


class HandlerTest(unittest.TestCase):
    def test_abstract_call(self):
        assert_that(calling(Handler('h', None)).with_args('s', 'c'), raises(NotImplementedError))

    def test_qualified_name(self):
        assert_that(qualified_name('', 'greet'), is_('greet'))
        assert_that(qualified_name('chat', 'greet'), is_('chat.greet'))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
