import pytest

from aesdsocket.tailq import LinkedList, TailQueue


class Token:
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"Token({self.name!r})"


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_init_preserves_order(cls):
    items = [Token(n) for n in "abc"]
    lst = cls(items)
    assert list(lst) == items
    assert len(lst) == 3
    assert lst.first() is items[0]


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_empty_list(cls):
    lst = cls()
    assert not lst
    assert len(lst) == 0
    assert lst.first() is None
    assert list(lst) == []


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_next_and_prev(cls):
    a, b, c = Token("a"), Token("b"), Token("c")
    lst = cls([a, b, c])
    assert lst.next_of(a) is b
    assert lst.next_of(c) is None
    assert lst.prev_of(c) is b
    assert lst.prev_of(a) is None


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_insert_head(cls):
    a, b = Token("a"), Token("b")
    lst = cls([a])
    lst.insert_head(b)
    assert list(lst) == [b, a]
    assert lst.prev_of(a) is b


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_insert_after_and_before(cls):
    a, b, c, d = (Token(n) for n in "abcd")
    lst = cls([a, c])
    lst.insert_after(a, b)
    lst.insert_before(a, d)
    assert list(lst) == [d, a, b, c]
    assert lst.first() is d
    assert lst.prev_of(b) is a
    assert lst.next_of(b) is c


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_remove_anywhere(cls):
    items = [Token(n) for n in "abcde"]
    lst = cls(items)
    lst.remove(items[0])
    lst.remove(items[2])
    lst.remove(items[4])
    assert list(lst) == [items[1], items[3]]
    assert lst.prev_of(items[3]) is items[1]
    assert items[2] not in lst
    assert len(lst) == 2


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_remove_missing_raises(cls):
    lst = cls([Token("a")])
    with pytest.raises(ValueError):
        lst.remove(Token("a"))


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_duplicate_insert_raises(cls):
    a = Token("a")
    lst = cls([a])
    with pytest.raises(ValueError):
        lst.insert_head(a)
    assert len(lst) == 1


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_membership_is_identity(cls):
    lst = cls([1000000, "x"])
    assert "x" in lst
    assert [] not in lst


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_remove_during_iteration(cls):
    items = [Token(n) for n in "abcd"]
    lst = cls(items)
    seen = []
    for item in lst:
        seen.append(item)
        lst.remove(item)
    assert seen == items
    assert not lst


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_concat(cls):
    a, b, c = Token("a"), Token("b"), Token("c")
    first = cls([a])
    second = cls([b, c])
    first.concat(second)
    assert list(first) == [a, b, c]
    assert not second
    assert first.prev_of(b) is a


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_concat_into_empty(cls):
    a = Token("a")
    first = cls()
    second = cls([a])
    first.concat(second)
    assert list(first) == [a]
    assert len(second) == 0


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_concat_self_raises(cls):
    lst = cls([Token("a")])
    with pytest.raises(ValueError):
        lst.concat(lst)


def test_concat_wrong_type_raises():
    with pytest.raises(TypeError):
        LinkedList().concat(TailQueue())


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_swap(cls):
    a, b, c = Token("a"), Token("b"), Token("c")
    left = cls([a])
    right = cls([b, c])
    left.swap(right)
    assert list(left) == [b, c]
    assert list(right) == [a]
    assert b in left and a not in left


@pytest.mark.parametrize("cls", [LinkedList, TailQueue])
def test_clear(cls):
    lst = cls([Token("a"), Token("b")])
    lst.clear()
    assert len(lst) == 0
    assert lst.first() is None


def test_tailqueue_tail_operations():
    a, b, c = Token("a"), Token("b"), Token("c")
    q = TailQueue()
    q.insert_tail(a)
    q.insert_tail(b)
    q.insert_head(c)
    assert list(q) == [c, a, b]
    assert q.last() is b
    q.remove(b)
    assert q.last() is a


def test_tailqueue_reversed():
    items = [Token(n) for n in "abcd"]
    q = TailQueue(items)
    assert list(reversed(q)) == items[::-1]


def test_tailqueue_reversed_with_removal():
    items = [Token(n) for n in "abc"]
    q = TailQueue(items)
    for item in reversed(q):
        q.remove(item)
    assert len(q) == 0
    assert q.last() is None


def test_tailqueue_last_after_insert_after_tail():
    a, b = Token("a"), Token("b")
    q = TailQueue([a])
    q.insert_after(a, b)
    assert q.last() is b