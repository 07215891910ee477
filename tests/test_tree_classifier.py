# ruff: noqa: ANN201, ANN001
import pytest
from conftest import branch_payload, repository_payload, tree_payload

from templatehub.models.github import Repository
from templatehub.services.templates import Template, TemplateCatalog, TreeClassifier


@pytest.fixture
def repository():
    return Repository.model_validate(repository_payload())


@pytest.fixture
def classifier(client, paths, git):
    def factory(repository, sub_directory):
        return Template(repository, sub_directory, paths=paths, client=client, git=git)

    return TreeClassifier(client, factory)


@pytest.mark.asyncio
async def test_manifest_at_root_is_single_template(classifier, github, repository):
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add("repos/x/y/git/trees/abc", tree_payload((".addon", "blob", "1"), ("src", "tree", "2")))
    catalog = TemplateCatalog()

    templates = await classifier.classify(repository, catalog)

    assert len(templates) == 1
    assert templates[0].sub_directory is None
    assert templates[0].key == "1"
    assert templates[0].siblings == []
    assert catalog.get("1") is templates[0]
    assert github.count("repos/x/y/git/trees/2") == 0


@pytest.mark.asyncio
async def test_nested_templates_are_siblings(classifier, github, repository):
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add(
        "repos/x/y/git/trees/abc",
        tree_payload(("a", "tree", "sa"), ("b", "tree", "sb"), ("c", "tree", "sc"), ("LICENSE", "blob", "l")),
    )
    github.add("repos/x/y/git/trees/sa", tree_payload((".addon", "blob", "1")))
    github.add("repos/x/y/git/trees/sb", tree_payload((".addon", "blob", "2"), ("code", "tree", "3")))
    github.add("repos/x/y/git/trees/sc", tree_payload(("readme.md", "blob", "4")))
    catalog = TemplateCatalog()

    templates = await classifier.classify(repository, catalog)

    a, b = templates
    assert [a.sub_directory, b.sub_directory] == ["a", "b"]
    assert [a.key, b.key] == ["1_a", "1_b"]
    assert a.siblings == [b]
    assert b.siblings == [a]
    assert len(catalog) == 2


@pytest.mark.asyncio
async def test_tree_without_manifest_or_directories_is_not_a_template(classifier, github, repository):
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add("repos/x/y/git/trees/abc", tree_payload(("README.md", "blob", "1"), ("main.py", "blob", "2")))
    catalog = TemplateCatalog()

    assert await classifier.classify(repository, catalog) == []
    assert len(catalog) == 0


@pytest.mark.asyncio
async def test_manifest_is_only_searched_one_level_down(classifier, github, repository):
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add("repos/x/y/git/trees/abc", tree_payload(("outer", "tree", "so")))
    github.add("repos/x/y/git/trees/so", tree_payload(("inner", "tree", "si")))
    github.add("repos/x/y/git/trees/si", tree_payload((".addon", "blob", "1")))

    assert await classifier.classify(repository, TemplateCatalog()) == []
    assert github.count("repos/x/y/git/trees/si") == 0


@pytest.mark.asyncio
async def test_branch_failure_yields_nothing(classifier, github, repository):
    assert await classifier.classify(repository, TemplateCatalog()) == []
    assert github.requests == ["repos/x/y/branches/main"]


@pytest.mark.asyncio
async def test_failed_subdirectory_is_skipped(classifier, github, repository):
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add("repos/x/y/git/trees/abc", tree_payload(("a", "tree", "sa"), ("broken", "tree", "sx")))
    github.add("repos/x/y/git/trees/sa", tree_payload((".addon", "blob", "1")))
    github.add("repos/x/y/git/trees/sx", {"message": "Server Error"}, status=500)

    templates = await classifier.classify(repository, TemplateCatalog())

    assert [t.sub_directory for t in templates] == ["a"]
    assert templates[0].siblings == []


@pytest.mark.asyncio
async def test_manifest_filename_is_configurable(client, paths, git, github, repository):
    classifier = TreeClassifier(
        client,
        lambda repo, sub: Template(repo, sub, paths=paths, client=client, git=git),
        manifest_filename="template.json",
    )
    github.add("repos/x/y/branches/main", branch_payload("abc"))
    github.add("repos/x/y/git/trees/abc", tree_payload(("template.json", "blob", "1")))

    templates = await classifier.classify(repository, TemplateCatalog())

    assert len(templates) == 1
