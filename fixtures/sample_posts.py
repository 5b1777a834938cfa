"""
Sample post sources for corpus, renderer and publisher tests.
Each entry maps a corpus-relative path to the file's text.
"""

from pathlib import Path

TYPE_LISTS_POST = '''---
title: "Type lists without recursion"
date: 2023-04-12T09:30:00+02:00
summary: "Picking the N-th type of a pack."
tags: ["C++", "templates"]
author: "Test Author"
---

Intro paragraph about type lists.

<!--more-->

## Recursive lookup

{{< highlight cpp "linenos=table,hl_lines=2" >}}
template <std::size_t N, typename T, typename... Ts>
struct type_at : type_at<N - 1, Ts...> {};
{{< /highlight >}}

See [the CRT post]({{< relref "crt-destructors" >}}) for shutdown order[^1].

[^1]: A footnote.
'''

CRT_POST = '''+++
title = "Static destructors on MSVC and glibc"
date = 2023-09-03
tags = ["C++", "CRT"]
draft = false
+++

Objects with static storage duration are destroyed in reverse order.

{{% details summary="Why the DSO handle matters" %}}
`__cxa_finalize` runs per module.
{{% /details %}}
'''

UNREAL_POST = '''---
title: "Unreal editor lifecycle pitfalls"
date: 2024-02-18 20:15:00
tags:
  - Unreal Engine
  - C++
categories: gamedev
---

Editor code lives longer than game code.

{{< figure src="/images/shutdown.png" alt="Shutdown" caption="Teardown order" >}}

Back to [type lists]({{< ref "posts/type-lists.md#recursive-lookup" >}}).
'''

DRAFT_POST = '''---
title: "Static init order notes"
date: 2024-06-01
tags: [C++]
draft: true
---

Unfinished notes.
'''

SAMPLE_POSTS = {
    "posts/type-lists.md": TYPE_LISTS_POST,
    "posts/crt-destructors.md": CRT_POST,
    "posts/unreal-lifecycle/index.md": UNREAL_POST,
    "posts/init-order.md": DRAFT_POST,
    "posts/_index.md": '---\ntitle: "Posts"\n---\n',
}


def write_corpus(root: Path, posts: dict[str, str] | None = None) -> Path:
    """Write post sources under root and return root."""
    for rel, text in (posts if posts is not None else SAMPLE_POSTS).items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root
