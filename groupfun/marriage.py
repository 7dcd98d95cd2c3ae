"""Daily "marry a group member" game built on the marriage registry."""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from .registry import ALL_GROUPS, MarriageRecord, MarriageRegistry, Role

SKILL_COOLDOWN = timedelta(hours=12)
CANDIDATE_WINDOW = 30

CONFESSION_SUCCESS = (
    "是个勇敢的孩子(*/ω＼*) 今天的运气都降临在你的身边~\n\n",
    "(´･ω･`)对方答应了你 并表示愿意当今天的CP\n\n",
)
CONFESSION_FAILURE = (
    "今天的运气有一点背哦~明天再试试叭",
    "_(:з」∠)_下次还有机会 咱抱抱你w",
    "今天失败了惹. 摸摸头~咱明天还有机会",
)
NTR_SUCCESS = ("因为你的个人魅力~~今天他就是你的了w\n\n",)
DIVORCE_FAILURE = (
    "打是情，骂是爱，,不打不亲不相爱。答应我不要分手。",
    "床头打架床尾和，夫妻没有隔夜仇。安啦安啦，不要闹变扭。",
)
DIVORCE_SUCCESS = (
    "离婚成功力\n天涯何处无芳草，何必单恋一枝花？不如再摘一支（bushi",
    "离婚成功力\n话说你不考虑当个1？",
)

ALONE_TODAY = "今天你是单身贵族噢"
NO_SINGLES_LEFT = "~群里没有ta人是单身了哦 明天再试试叭"
DREW_SELF = "呜...没娶到，你可以再尝试一次"
ALREADY_TOGETHER = "笨蛋~你们明明已经在一起了啊w"
HAS_WIFE = "笨蛋~你家里还有个吃白饭的w"
IS_WIFE = "该是0就是0，当0有什么不好"
YOU_ALONE = "今天的你是单身贵族噢"
TARGET_HAS_WIFE = "他有别的女人了，你该放下了"
TARGET_IS_WIFE = "这是一个纯爱的世界，拒绝NTR"
TARGET_ALONE = "今天的ta是单身贵族噢"
NARCISSIST = "今日获得成就：自恋狂"
CHOSE_ALONE = "今日获得成就：单身贵族"
SELF_STEAL = "今日获得成就：自我攻略"
STEAL_FAILED = "失败了！可惜"
TARGET_SINGLE = "ta现在还是单身哦，快向ta表白吧！"
STEAL_YOU_ALONE = "今天的你是单身贵族哦"
STEAL_HAS_WIFE = "打灭，不给纳小妾！"
STEAL_TARGET_ALONE = "今天的ta是单身贵族哦"
NOBODY_MARRIED = "今天还没有人结婚哦"
NOT_MARRIED = "今天你还没有结婚哦"
GROUP_ONLY = "该功能只能在群组使用或者指定群组"
RESET_DONE = "重置成功"
PROPOSE_MARRY = "娶"

Names = Callable[[int], str]


class Cooldown:
    """Allow one use per key within each period."""

    def __init__(
        self,
        period: float | timedelta = SKILL_COOLDOWN,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if isinstance(period, timedelta):
            period = period.total_seconds()
        if period <= 0:
            raise ValueError("cooldown period must be positive")
        self._period = float(period)
        self._clock = clock if clock is not None else time.monotonic
        self._last: dict[object, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: object) -> bool:
        """Consume the key's use if it is available; report whether it was."""
        with self._lock:
            now = self._clock()
            last = self._last.get(key)
            if last is not None and now - last < self._period:
                return False
            self._last[key] = now
            return True


def _target(record: MarriageRecord | None) -> int:
    return record.target if record is not None else 0


def _partner_line(name: str, qq: int) -> str:
    return f"\n[{name}]({qq})哒"


class MarriageBureau:
    """The game rules: drawing, proposing, stealing and divorcing."""

    def __init__(
        self,
        registry: MarriageRegistry,
        rng: random.Random | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._registry = registry
        self._rng = rng if rng is not None else random.Random()
        self._today = today if today is not None else date.today

    def _pick(self, options: tuple[str, ...] | list) -> object:
        return options[self._rng.randrange(len(options))]

    def ensure_today(self, gid: int) -> bool:
        """Clear the group's couples if they are from an earlier day; report if so."""
        today = self._today()
        if self._registry.check_update(gid, today) != today:
            self._registry.reset(gid, today)
            return True
        return False

    def draw(
        self,
        gid: int,
        uid: int,
        members: Iterable[tuple[int, int]],
        names: Names,
    ) -> str:
        """Marry uid to a random single among the most recently active members."""
        self.ensure_today(gid)
        info, role = self._registry.lookup(gid, uid)
        if role is not Role.SINGLE and _target(info) == 0:
            return ALONE_TODAY
        if role is Role.HUSBAND:
            return "今天你已经娶过了，群老婆是" + _partner_line(info.targetname, info.target)
        if role is Role.WIFE:
            return "今天你被娶了，群老公是" + _partner_line(info.username, info.user)
        recent = sorted(members, key=lambda member: member[1])[-CANDIDATE_WINDOW:]
        singles = [
            member
            for member, _ in recent
            if self._registry.lookup(gid, member)[1] is Role.SINGLE
        ]
        if len(singles) <= 1:
            return NO_SINGLES_LEFT
        fiancee = self._pick(singles)
        if fiancee == uid:
            return DREW_SELF
        self._registry.register(
            gid, uid, fiancee, names(uid), names(fiancee), self._today()
        )
        return "今天你的群老婆是" + _partner_line(names(fiancee), fiancee)

    def can_propose(self, gid: int, uid: int, fiancee: int) -> str | None:
        """Return why uid may not propose to fiancee, or None if they may."""
        if self.ensure_today(gid):
            return None
        own, own_role = self._registry.lookup(gid, uid)
        other, other_role = self._registry.lookup(gid, fiancee)
        if own_role is Role.SINGLE and other_role is Role.SINGLE:
            return None
        if _target(own) == fiancee:
            return ALREADY_TOGETHER
        if own_role is Role.HUSBAND:
            return HAS_WIFE
        if own_role is Role.WIFE:
            return IS_WIFE
        if own_role is not Role.SINGLE and _target(own) == 0:
            return YOU_ALONE
        if other_role is Role.HUSBAND:
            return TARGET_HAS_WIFE
        if other_role is Role.WIFE:
            return TARGET_IS_WIFE
        if other_role is not Role.SINGLE and _target(other) == 0:
            return TARGET_ALONE
        return None

    def propose(
        self, gid: int, uid: int, fiancee: int, choice: str, names: Names
    ) -> str:
        """Confess to fiancee; choice "娶" takes them as wife, anything else as husband."""
        today = self._today()
        if uid == fiancee:
            if self._rng.randrange(2) == 0:
                return NARCISSIST
            self._registry.register(gid, uid, 0, "", "", today)
            return CHOSE_ALONE
        if self._rng.randrange(2) == 0:
            return self._pick(CONFESSION_FAILURE)
        if choice == PROPOSE_MARRY:
            self._registry.register(
                gid, uid, fiancee, names(uid), names(fiancee), today
            )
            headline = "\n今天你的群老婆是"
        else:
            self._registry.register(
                gid, fiancee, uid, names(fiancee), names(uid), today
            )
            headline = "\n今天你的群老公是"
        return (
            self._pick(CONFESSION_SUCCESS)
            + headline
            + _partner_line(names(fiancee), fiancee)
        )

    def can_steal(self, gid: int, uid: int, fiancee: int) -> str | None:
        """Return why uid may not take fiancee from their partner, or None."""
        if self.ensure_today(gid):
            return TARGET_SINGLE
        if fiancee == uid:
            return None
        own, own_role = self._registry.lookup(gid, uid)
        if _target(own) == fiancee:
            return ALREADY_TOGETHER
        if own_role is not Role.SINGLE and _target(own) == 0:
            return STEAL_YOU_ALONE
        if own_role is Role.HUSBAND:
            return STEAL_HAS_WIFE
        if own_role is Role.WIFE:
            return IS_WIFE
        other, other_role = self._registry.lookup(gid, fiancee)
        if other_role is Role.SINGLE:
            return TARGET_SINGLE
        if _target(other) == 0:
            return STEAL_TARGET_ALONE
        return None

    def steal(self, gid: int, uid: int, fiancee: int, names: Names) -> str:
        """Try to take fiancee from their partner; succeeds three times in ten."""
        if fiancee == uid:
            return SELF_STEAL
        if self._rng.randrange(10) // 4 != 0:
            return STEAL_FAILED
        today = self._today()
        _, role = self._registry.lookup(gid, fiancee)
        if role is Role.SINGLE:
            return TARGET_SINGLE
        if role is Role.HUSBAND:
            self._registry.remarry(
                gid, fiancee, uid, names(fiancee), names(uid), today
            )
            title = "老公"
        else:
            self._registry.remarry(
                gid, uid, fiancee, names(uid), names(fiancee), today
            )
            title = "老婆"
        return (
            self._pick(NTR_SUCCESS)
            + f"今天你的群{title}是"
            + _partner_line(names(fiancee), fiancee)
        )

    def divorce(self, gid: int, uid: int) -> str | None:
        """Try to end uid's marriage; None when uid has nothing to end."""
        if self.ensure_today(gid):
            return NOT_MARRIED
        info, role = self._registry.lookup(gid, uid)
        if role is Role.SINGLE:
            return None
        if role is Role.HUSBAND:
            if self._rng.randrange(10) != 1:
                return self._pick(DIVORCE_FAILURE)
            self._registry.divorce(gid, info.target)
            return DIVORCE_SUCCESS[0]
        if self._rng.randrange(10) != 0:
            return self._pick(DIVORCE_FAILURE)
        self._registry.divorce(gid, info.target)
        return DIVORCE_SUCCESS[1]

    def roster_text(self, gid: int) -> str:
        """Today's couples of the group, one per line."""
        if self.ensure_today(gid):
            return NOBODY_MARRIED
        couples = self._registry.roster(gid)
        if not couples:
            return NOBODY_MARRIED
        lines = [
            f"{c.username}({c.user}) ←→ {c.targetname}({c.target})" for c in couples
        ]
        return "群老婆列表\n" + "\n".join(lines)

    def reset(self, target: str, group_id: int | None) -> str:
        """Clear couples: "" or "本群" for this group, "所有" for all, else a group id."""
        if target in ("", "本群"):
            if not group_id:
                return GROUP_ONLY
            command = str(group_id)
        elif target == "所有":
            command = ALL_GROUPS
        else:
            command = target
        self._registry.reset(command, self._today())
        return RESET_DONE