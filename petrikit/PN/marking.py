from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, Mapping, Optional, Tuple, Union

from ..exceptions import NoSuchNodeError, StructureError
from .token import Token, TokenLike

if TYPE_CHECKING:
    from .petri_net import PetriNet, Place, Transition

PlaceRef = Union[str, "Place"]


class Marking:
    """
    Immutable token distribution over the places of one :class:`PetriNet`.

    Tokens are stored aligned with the place ids of the net (sorted order).
    When the net gains places after the marking was created, the new places
    read as zero; places that were removed from the net raise
    :class:`~petrikit.exceptions.NoSuchNodeError` instead of defaulting.

    Every "mutator" returns a new marking.

    :param net: Net this marking belongs to.
    :type net: PetriNet
    :param tokens: Optional mapping ``place id -> token count``; missing
        places get zero tokens.
    :type tokens: Optional[Mapping[str, Union[Token, int]]]
    :raises NoSuchNodeError: If ``tokens`` names a place the net does not have.
    """

    __slots__ = ("_net", "_place_ids", "_tokens")

    def __init__(
        self, net: "PetriNet", tokens: Optional[Mapping[str, TokenLike]] = None
    ) -> None:
        self._net = net
        self._place_ids: Tuple[str, ...] = net.place_ids
        values = [Token.ZERO] * len(self._place_ids)
        if tokens:
            index = {pid: i for i, pid in enumerate(self._place_ids)}
            for pid, tok in tokens.items():
                if pid not in index:
                    raise NoSuchNodeError(net.name, pid)
                values[index[pid]] = Token.value_of(tok)
        self._tokens: Tuple[Token, ...] = tuple(values)

    @classmethod
    def from_mapping(cls, net: "PetriNet", tokens: Mapping[str, TokenLike]) -> "Marking":
        """Same as ``Marking(net, tokens)``; places not named get zero tokens."""
        return cls(net, tokens)

    @classmethod
    def from_counts(cls, net: "PetriNet", *counts: TokenLike) -> "Marking":
        """
        Build a marking from token counts ordered like ``net.place_ids``.

        :raises StructureError: If the number of counts does not match the
            number of places.
        """
        ids = net.place_ids
        if len(counts) != len(ids):
            raise StructureError(
                f"Got {len(counts)} token counts for {len(ids)} places of net {net.name!r}."
            )
        return cls._create(net, ids, tuple(Token.value_of(c) for c in counts))

    @classmethod
    def _create(
        cls, net: "PetriNet", place_ids: Tuple[str, ...], tokens: Tuple[Token, ...]
    ) -> "Marking":
        m = cls.__new__(cls)
        m._net = net
        m._place_ids = place_ids
        m._tokens = tokens
        return m

    # ------------------------------------------------------------------
    # Consistency with the owning net
    # ------------------------------------------------------------------
    def _sync(self) -> None:
        current = self._net.place_ids
        if current is self._place_ids:
            return
        old = dict(zip(self._place_ids, self._tokens))
        self._place_ids = current
        self._tokens = tuple(old.get(pid, Token.ZERO) for pid in current)

    def _index(self, place: PlaceRef) -> int:
        if isinstance(place, str):
            pid = place
        else:
            if place.net is not self._net:
                raise StructureError(
                    f"Place {place.id!r} does not belong to net {self._net.name!r}."
                )
            pid = place.id
        self._sync()
        try:
            return self._place_ids.index(pid)
        except ValueError:
            raise NoSuchNodeError(self._net.name, pid) from None

    def _with(self, idx: int, token: Token) -> "Marking":
        tokens = list(self._tokens)
        tokens[idx] = token
        return Marking._create(self._net, self._place_ids, tuple(tokens))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def net(self) -> "PetriNet":
        return self._net

    def get_token(self, place: PlaceRef) -> Token:
        """
        Token count of ``place``.

        :param place: Place id or :class:`Place`.
        :raises NoSuchNodeError: If the place is not (or no longer) in the net.
        :raises StructureError: If the place object belongs to another net.
        """
        idx = self._index(place)
        return self._tokens[idx]

    __getitem__ = get_token

    def values(self) -> Tuple[Token, ...]:
        """Tokens ordered like ``net.place_ids``."""
        self._sync()
        return self._tokens

    def as_dict(self) -> Dict[str, Token]:
        self._sync()
        return dict(zip(self._place_ids, self._tokens))

    def has_omega(self) -> bool:
        self._sync()
        return any(t.is_omega for t in self._tokens)

    def __iter__(self) -> Iterator[Tuple[str, Token]]:
        return iter(self.as_dict().items())

    def __len__(self) -> int:
        self._sync()
        return len(self._tokens)

    # ------------------------------------------------------------------
    # Derived markings
    # ------------------------------------------------------------------
    def set_token_count(self, place: PlaceRef, token: TokenLike) -> "Marking":
        return self._with(self._index(place), Token.value_of(token))

    def add_token_count(self, place: PlaceRef, amount: TokenLike) -> "Marking":
        """
        Add ``amount`` (an int, possibly negative, or a :class:`Token`).

        :raises ValueError: If a finite count would become negative.
        """
        idx = self._index(place)
        return self._with(idx, self._tokens[idx].add(amount))

    def fire_transitions(self, *transitions: Union[str, "Transition"]) -> "Marking":
        """
        Fire ``transitions`` in order, starting from this marking.

        :raises TransitionFireError: If one of them is not enabled.
        """
        result = self
        for t in transitions:
            result = self._net.fire(result, t)
        return result

    def copy_to(self, net: "PetriNet") -> "Marking":
        """
        Rebind this marking to ``net`` by place id.

        :raises NoSuchNodeError: If ``net`` lacks one of the places.
        """
        if net is self._net:
            return self
        return Marking(net, self.as_dict())

    # ------------------------------------------------------------------
    # Domination and widening
    # ------------------------------------------------------------------
    def _aligned(self, other: "Marking") -> Tuple[Tuple[Token, ...], Tuple[Token, ...]]:
        if other._net is not self._net:
            raise StructureError("Cannot compare markings of different nets.")
        self._sync()
        other._sync()
        return self._tokens, other._tokens

    def covers(self, other: "Marking") -> bool:
        """``True`` iff every place holds at least as many tokens as in ``other``."""
        own, theirs = self._aligned(other)
        return all(a >= b for a, b in zip(own, theirs))

    def cover(self, other: "Marking") -> Optional["Marking"]:
        """
        Widen this marking against a marking it covers.

        Every finite place where this marking strictly exceeds ``other``
        becomes OMEGA; the remaining places keep this marking's tokens.

        :returns: The widened marking, or ``None`` if ``other`` has more
            tokens on some place or no finite place strictly increases
            (in particular when both markings are equal).
        """
        own, theirs = self._aligned(other)
        widened = []
        grew = False
        for a, b in zip(own, theirs):
            cmp = a.compare(b)
            if cmp < 0:
                return None
            if cmp > 0 and not a.is_omega:
                widened.append(Token.OMEGA)
                grew = True
            else:
                widened.append(a)
        if not grew:
            return None
        return Marking._create(self._net, self._place_ids, tuple(widened))

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Marking):
            return NotImplemented
        if other._net is not self._net:
            return False
        self._sync()
        other._sync()
        return self._tokens == other._tokens

    def __hash__(self) -> int:
        # zero entries are skipped so the hash survives adding places
        self._sync()
        return hash(
            frozenset(
                (pid, tok)
                for pid, tok in zip(self._place_ids, self._tokens)
                if tok != Token.ZERO
            )
        )

    def __str__(self) -> str:
        self._sync()
        inner = ", ".join(f"{p}:{t}" for p, t in zip(self._place_ids, self._tokens))
        return "{" + inner + "}"

    def __repr__(self) -> str:
        return f"Marking({self})"
