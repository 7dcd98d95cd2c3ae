# groupfun

The logic behind a set of group chat pastimes. Each module takes plain values
such as group ids, user ids, nicknames and timestamps. It returns text,
records or images that a bot can send. Where state is needed, it is kept in
SQLite files.

## Install

```
pip install .
pip install ".[test]"   # with pytest and responses
```

## Modules

- `groupfun.registry`: `MarriageRegistry` is a per-group SQLite register of daily couples. It has `check_update`, `reset`, `register`, `remarry`, `divorce`, `lookup` and `roster`. `lookup` returns a `MarriageRecord` and a `Role`. `truncate_name` shortens a name to a width limit, given a function that measures each character.
- `groupfun.marriage`: `MarriageBureau` holds the rules of the daily pairing game. It has `draw`, `can_propose`/`propose`, `can_steal`/`steal`, `divorce`, `roster_text` and `reset`. Each returns the reply text. Couples from an earlier day are cleared on first use each day. `Cooldown` is a separate per-key rate limit, twelve hours by default. Callers apply it to the skills themselves.
- `groupfun.reborn`: `WeightedChooser`, `load_areas` (reads a JSON list of `{"name", "weight"}`), `area_chooser`, `gender_chooser` and `reborn`, a weighted "rebirth" roll.
- `groupfun.wtf`: `new_wtf(index)` returns a `Wtf` quiz, or `None`. `Wtf.predict(*names)` queries the online quiz site and raises `WtfError` on failure. `list_text()` lists every quiz with its number.
- `groupfun.runcode`: `lookup_language`, `template` and `run_code` send a snippet to an online compiler and raise `RunCodeError` on failure. `cut_too_long` and `clear_newline_suffix` tidy the output. The form token is read from the `RUNCODE_TOKEN` environment variable.
- `groupfun.wordle`: `WordleGame` checks guesses against a dictionary. It raises `LengthNotEnough`, `UnknownWord` or `TimesRunOut`, gives per-letter `Mark`s, and renders the board as PNG bytes with Pillow. The module also has `load_words` and `word_length`.
- `groupfun.score`: `ScoreDB` and `sign_in` handle the daily sign-in and scores, with a cap of 120. The module also has `level_of`, `next_level_score` and `hour_word`.
- `groupfun.sleep`: `SleepDB.sleep` / `SleepDB.get_up` return a position and an elapsed time. The module also has `is_morning`, `is_evening`, `split_duration`, `good_morning_text` and `good_night_text`.
- `groupfun.vtb`: `VtbDB` is a three-level catalogue of voice clips. It has numbered menus, `third_category`, `random_vtb`, `store_vtb_list` and `store_vtb`. `fetch_vtb_list` and `fetch_vtb_page` download the data. `escape_record_url` encodes a clip's file name.
- `groupfun.tarot`: `load_cards`, `build_info_map`, `parse_count`, `draw` (returns `Draw` items), `explain` and `card_image_url`. Image URLs start from the `TAROT_IMAGE_BASE` environment variable.
- `groupfun.ymgal`: `YmgalDB` stores `Picset`s. The module has HTML parsers (`parse_page_count`, `parse_picset_ids`, `parse_picset`), `update`, which takes an optional fetch function, and `format_picset`.
- `groupfun.word_count`: `load_stopwords`, `is_chinese_word`, `count_words`, `rank_by_word_count` and `clamp_message_count`.

## Example

```python
import random
from datetime import date

from groupfun.registry import MarriageRegistry
from groupfun.marriage import MarriageBureau

with MarriageRegistry("marriages.db") as registry:
    bureau = MarriageBureau(registry, random.Random(), date.today)
    print(bureau.roster_text(123))
```

```python
from groupfun.wordle import WordleGame

game = WordleGame("apple", ["apple", "angle", "ample"])
won = game.guess("angle")
png_bytes = game.render()
```

## What it does not do

- It has no chat client, no command line and no message dispatch. A bot must match messages and call these functions itself.
- It does not download its data files: card lists, word lists, area weights or stopwords. Callers supply them.
- The couples list and the score ranking are given as text or data, not drawn as images.
- Sign-in backgrounds are not fetched.
- Word slicing for `count_words` must come from elsewhere.