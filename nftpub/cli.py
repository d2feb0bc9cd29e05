#!/usr/bin/env python
#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# To use this, install with:
#
#   pip install --editable .
#
# That will create the command "nftpub" in your path.
#
#
import click, sys, os, datetime

from nftpub.constants import *
from nftpub.exceptions import WorkflowFailed
from nftpub.identity import Keypair
from nftpub.config import load_config
from nftpub.journal import Journal
from nftpub.ledger import LedgerClient
from nftpub.storage import HTTPStorage, MemoryStorage
from nftpub.transport import HTTPLedgerTransport, EmulatorTransport
from nftpub.workflow import Publication
from nftpub.utils import explorer_url, render_royalty
from nftpub import __version__

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, RuntimeError):
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def get_identity():
    fname = os.path.expanduser(global_opts['keypair'])
    try:
        return Keypair.from_json_file(fname)
    except FileNotFoundError:
        fail(f"No keypair file: {fname}")
    except ValueError as exc:
        fail(str(exc))

def get_session(identity):
    # Build ledger client and storage from global options
    if global_opts.get('verbose'):
        import nftpub.transport as tt
        tt.VERBOSE = True

    if global_opts.get('emulate'):
        from nftpub.emulator import LedgerState
        tr = EmulatorTransport(LedgerState())
        storage = MemoryStorage()
        click.echo("WARNING: Emulated ledger and storage. Nothing is published!", err=True)
    else:
        url = global_opts.get('rpc_url')
        if not url:
            fail("Need --rpc-url (or NFTPUB_RPC_URL) for the ledger gateway.")
        key = global_opts.get('storage_key')
        if not key:
            fail("Need --storage-key (or NFTPUB_STORAGE_KEY) for uploads.")

        tr = HTTPLedgerTransport(url)
        storage = HTTPStorage(key, server=global_opts['storage_url'],
                                    gateway=global_opts['gateway'])

    ledger = LedgerClient(tr, identity, commitment=global_opts['commitment'])

    return ledger, storage

def dump_dict(d, indent=''):
    for k,v in d.items():
        if isinstance(v, dict):
            click.echo(f'{indent}{k}:')
            dump_dict(v, indent + '  ')
            continue
        if hasattr(v, '_asdict'):
            click.echo(f'{indent}{k}:')
            dump_dict(v._asdict(), indent + '  ')
            continue
        if isinstance(v, datetime.datetime):
            v = v.isoformat()

        click.echo('%s%s: %s' % (indent, k, v))

def finish(pub):
    # run until done, map outcome onto exit code
    try:
        res = pub.run()
    except WorkflowFailed as exc:
        if pub.journal:
            click.echo(f"State saved, resume with: nftpub resume ... {pub.journal.fname}", err=True)
        fail(f"Stopped at step {exc.step}: {exc.cause.__class__.__name__}: {exc.cause}")

    click.echo(f"\nCollection: {res.collection.address}")
    click.echo(f"NFT:        {res.asset.address}")
    click.echo(f"Metadata:   {res.update_uri}")
    click.echo("Finished successfully.")

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Ambiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args

#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--keypair', '-k', default='~/.config/solana/id.json', metavar="id.json",
                    help="Keypair file (solana-keygen format) that signs everything")
@click.option('--rpc-url', '-u', envvar='NFTPUB_RPC_URL', default=None,
                    help="JSON-RPC endpoint of the ledger gateway")
@click.option('--storage-url', envvar='NFTPUB_STORAGE_URL', default=DEFAULT_STORAGE_URL,
                    show_default=True, help="Upload service")
@click.option('--storage-key', envvar='NFTPUB_STORAGE_KEY', default=None,
                    help="API key for upload service")
@click.option('--gateway', default=DEFAULT_GATEWAY, show_default=True,
                    help="IPFS gateway used in published URIs")
@click.option('--cluster', '-c', default=DEFAULT_CLUSTER, show_default=True,
                    help="Cluster name for explorer links")
@click.option('--commitment', type=click.Choice(COMMITMENT_LEVELS), default=DEFAULT_COMMITMENT,
                    show_default=True, help="Wait for this level after each transaction")
@click.option('--emulate', '-e', is_flag=True,
                    help="Use in-memory ledger and storage (dry run)")
@click.option('--verbose', '-v', is_flag=True,
                    help="Show traffic with ledger.")
@click.option('--pdb', is_flag=True,
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Publish a collection NFT, an NFT inside it, then update that NFT's metadata.

    You can use "res" for "resume": any distinct prefix for all commands.
    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    # global options, mostly not considered here
    global global_opts
    global_opts.update(kws)

@main.command('address')
def show_address():
    "Show the address of the signing keypair"
    click.echo(get_identity().address)

@main.command('run')
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False), metavar="config.json")
@click.option('--journal', '-j', type=click.Path(dir_okay=False), default=None,
                    metavar="run.cbor", help="Save progress here, so a failed run can be resumed")
def run_publication(config_file, journal):
    "Upload, mint collection + NFT, verify membership, then update metadata"
    ident = get_identity()
    try:
        config = load_config(config_file, ident)
    except ValueError as exc:
        fail(str(exc))

    if journal and os.path.exists(journal):
        fail(f"Journal already exists: {journal} (use resume, or remove it)")

    click.echo(f"Public Key: {ident.address}")
    click.echo(f"NFT: {config.asset.name} ({config.asset.symbol}), "
                    f"royalty {render_royalty(config.asset.royalty_bps)}")

    ledger, storage = get_session(ident)
    pub = Publication(config, storage, ledger, report=click.echo,
                        journal=Journal(journal) if journal else None,
                        cluster=global_opts['cluster'])
    finish(pub)

@main.command('resume')
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False), metavar="config.json")
@click.argument('journal', type=click.Path(exists=True, dir_okay=False), metavar="run.cbor")
def resume_publication(config_file, journal):
    "Carry on with a run that stopped, starting at the failed step"
    ident = get_identity()
    ledger, storage = get_session(ident)

    try:
        config = load_config(config_file, ident)
        pub = Journal(journal).load(config, storage, ledger, report=click.echo,
                                        cluster=global_opts['cluster'])
    except ValueError as exc:
        fail(str(exc))

    if pub.is_done:
        click.echo("Already completed, nothing to do.")
        return

    if global_opts.get('emulate') and ({'collection', 'collection_pending'} & set(pub.values)):
        # each emulated session starts with an empty ledger
        fail("Journal refers to minted assets, which --emulate cannot see. "
                "Resume against the real ledger.")

    click.echo(f"Resuming at step: {pub.step}")
    finish(pub)

@main.command('status')
@click.argument('journal', type=click.Path(exists=True, dir_okay=False), metavar="run.cbor")
def journal_status(journal):
    "Show what a journal file says about a run"
    try:
        body = Journal(journal).read()
    except ValueError as exc:
        fail(str(exc))

    dump_dict(body)

@main.command('find')
@click.argument('address', type=str)
def find_asset(address):
    "Look up an NFT by address and show its on-chain record"
    ledger, _ = get_session(get_identity())
    asset = ledger.find_asset_by_address(address)

    dump_dict(asset._asdict())
    click.echo(explorer_url('address', asset.address, global_opts['cluster']))

@main.command('members')
@click.argument('collection', type=str)
def list_members(collection):
    "List verified members of a collection"
    ledger, _ = get_session(get_identity())

    count = 0
    for addr in ledger.collection_members(collection):
        click.echo(addr)
        count += 1

    if not count:
        click.echo("(none verified)")

# EOF
