from pytest_bdd import scenarios, given, when, then, parsers
from labelpr.cli.main import cli

scenarios("features/contacts.feature")


@given("the store holds the sample data")
def sample_store(store):
    return store


@when(parsers.parse('the manager lists the "{partition}" partition'))
def list_partition(runner, context, store, partition):
    context["result"] = runner.invoke(cli, ["contacts", "list", "--partition", partition])


@when(parsers.parse('the manager adds a contact "{name}" with category "{category}"'))
def add_contact(runner, context, store, name, category):
    # Prompts: name, category, platform, link, reach, notes, tags
    inputs = f"{name}\n{category}\n\n\n\n\n\n"
    context["result"] = runner.invoke(cli, ["contacts", "add"], input=inputs)


@when(parsers.parse('the manager sets the category of contact "{contact_id}" to "{category}"'))
def edit_category(runner, context, store, contact_id, category):
    context["result"] = runner.invoke(cli, ["contacts", "edit", contact_id, "--category", category])


@when(parsers.parse('the manager deletes contact "{contact_id}" and confirms'))
def delete_confirmed(runner, context, store, contact_id):
    context["result"] = runner.invoke(cli, ["contacts", "delete", contact_id], input="y\n")


@when(parsers.parse('the manager deletes contact "{contact_id}" and declines'))
def delete_declined(runner, context, store, contact_id):
    context["result"] = runner.invoke(cli, ["contacts", "delete", contact_id], input="n\n")


@then(parsers.parse('contact "{contact_id}" is first in the "{partition}" partition'))
def first_in_partition(store, contact_id, partition):
    assert store.partition(partition)[0].id == contact_id
    others = [c.id for c in store.all_contacts() if c.id == contact_id]
    assert others == [contact_id]


@then(parsers.parse('contact "{contact_id}" no longer exists'))
def contact_gone(store, contact_id):
    assert contact_id not in [c.id for c in store.all_contacts()]


@then(parsers.parse('contact "{contact_id}" still exists'))
def contact_kept(store, contact_id):
    assert contact_id in [c.id for c in store.all_contacts()]
