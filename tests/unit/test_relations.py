from __future__ import annotations

import pytest

from parse_resource import HasManyCollection, RelationshipError, UnsavedRecordError
from parse_resource.orm.relations import BelongsToDescriptor, HasManyDescriptor
from tests.support import Author, Comment, FakeParseBackend, Post


def _pointer(class_name: str, object_id: str) -> dict:
    return {"__type": "Pointer", "className": class_name, "objectId": object_id}


def test_relationship_descriptors_are_derived_from_declarations() -> None:
    assert Post.__schema__.relations["author"] == BelongsToDescriptor("author", "Author")
    assert Post.__schema__.relations["comments"] == HasManyDescriptor(
        field_name="comments", owner_class="Post", target_class="Comment", foreign_key="post"
    )
    assert Author.__schema__.relations["posts"].foreign_key == "author"
    assert "author" in Post.__schema__.fields


def test_belongs_to_saves_target_then_updates_owner_once(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    backend.reset_calls()
    author = Author(name="Ann")

    post.author = author

    assert [(r.method, r.class_name) for r in backend.requests] == [("POST", "Author"), ("PUT", "Post")]
    put = backend.requests[1]
    assert put.object_id == post.id
    assert put.body == {"author": _pointer("Author", author.id)}
    assert post.changes == {}
    assert backend.objects["Post"][post.id]["author"] == _pointer("Author", author.id)


def test_belongs_to_reads_back_the_target(backend: FakeParseBackend) -> None:
    author = Author.insert(name="Ann")
    post = Post.insert(title="T")
    post.author = author

    reloaded = Post.find(post.id)

    assert reloaded.author == author
    assert reloaded.author.name == "Ann"


def test_belongs_to_on_new_owner_is_sent_with_the_create(backend: FakeParseBackend) -> None:
    author = Author.insert(name="Ann")
    backend.reset_calls()

    post = Post(title="T")
    post.author = author
    assert backend.requests == []

    post.save()

    assert [(r.method, r.class_name) for r in backend.requests] == [("POST", "Post")]
    assert backend.requests[0].body["author"] == _pointer("Author", author.id)


def test_belongs_to_rejects_non_records() -> None:
    with pytest.raises(RelationshipError):
        Post(title="T").author = "Ann"


def test_belongs_to_raises_when_owner_update_fails(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    author = Author.insert(name="Ann")
    backend.fail_next(500, method="PUT")

    with pytest.raises(RelationshipError):
        post.author = author

    assert post.changes == {"author": _pointer("Author", author.id)}


def test_has_many_of_new_owner_is_empty_without_calls(backend: FakeParseBackend) -> None:
    comments = Post(title="T").comments

    assert isinstance(comments, HasManyCollection)
    assert list(comments) == []
    assert backend.requests == []


def test_has_many_fetch_filters_by_pointer_to_owner(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    mine = backend.add("Comment", text="mine", post=_pointer("Post", post.id))
    backend.add("Comment", text="other", post=_pointer("Post", "someone-else"))
    backend.reset_calls()

    comments = post.comments

    assert [c.id for c in comments] == [mine]
    query = backend.calls("GET", "Comment")[0]
    assert '"post": {"__type": "Pointer", "className": "Post"' in query.params["where"]


def test_has_many_append_saves_child_and_points_it_back(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    comments = post.comments
    backend.reset_calls()
    child = Comment(text="first")

    comments.append(child)

    assert [(r.method, r.class_name) for r in backend.requests] == [("POST", "Comment"), ("PUT", "Comment")]
    assert child.persisted
    assert child in comments
    assert backend.objects["Comment"][child.id]["post"] == _pointer("Post", post.id)
    assert [c.id for c in post.comments] == [child.id]
    assert child.post == post


def test_has_many_insert_persists_like_append(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    comments = post.comments
    comments.create(text="second")
    backend.reset_calls()
    child = Comment(text="first")

    comments.insert(0, child)

    assert [(r.method, r.class_name) for r in backend.requests] == [("POST", "Comment"), ("PUT", "Comment")]
    assert comments[0] is child
    assert backend.objects["Comment"][child.id]["post"] == _pointer("Post", post.id)
    assert sorted(c.text for c in post.comments) == ["first", "second"]


def test_has_many_items_cannot_be_replaced_in_place(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    comments = post.comments
    comments.create(text="kept")
    backend.reset_calls()

    with pytest.raises(RelationshipError):
        comments[0] = Comment(text="stray")
    with pytest.raises(RelationshipError):
        comments[:] = [Comment(text="stray")]

    assert backend.requests == []
    assert [c.text for c in comments] == ["kept"]


def test_has_many_append_saves_a_new_owner_first(backend: FakeParseBackend) -> None:
    post = Post(title="T")

    post.comments.create(text="hello")

    assert [(r.method, r.class_name) for r in backend.requests] == [
        ("POST", "Post"),
        ("POST", "Comment"),
        ("PUT", "Comment"),
    ]
    assert post.persisted
    assert len(post.comments) == 1


def test_has_many_append_with_invalid_owner_raises(backend: FakeParseBackend) -> None:
    with pytest.raises(UnsavedRecordError):
        Post(body="no title").comments.append(Comment(text="x"))
    assert backend.requests == []


def test_has_many_rejects_other_record_types(backend: FakeParseBackend) -> None:
    post = Post.insert(title="T")
    with pytest.raises(RelationshipError):
        post.comments.append(Author(name="Ann"))


def test_has_many_cannot_be_assigned() -> None:
    with pytest.raises(AttributeError):
        Post(title="T").comments = []


def test_collections_of_different_owners_stay_separate(backend: FakeParseBackend) -> None:
    first = Post.insert(title="one")
    second = Post.insert(title="two")

    first_comments = first.comments
    second_comments = second.comments
    first_comments.create(text="a")
    second_comments += [Comment(text="b"), Comment(text="c")]

    assert first_comments.owner is first
    assert second_comments.owner is second
    assert [c.text for c in first.comments] == ["a"]
    assert sorted(c.text for c in second.comments) == ["b", "c"]


def test_author_posts_uses_lowercased_owner_class_as_foreign_key(backend: FakeParseBackend) -> None:
    author = Author.insert(name="Ann")

    author.posts.create(title="Written")

    stored = next(iter(backend.objects["Post"].values()))
    assert stored["author"] == _pointer("Author", author.id)
    assert [p.title for p in author.posts] == ["Written"]
