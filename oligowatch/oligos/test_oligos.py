# oligos/test_oligos.py
"""
Tests for the oligo repository: listing, creation, reassignment, bulk
actions and FASTA import.
"""

from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.urls import reverse

from core.exceptions import BackendError, BackendValidationError, NotFoundError
from core.sequences import FastaRecord
from core.testing import BackendViewTestCase
from oligos.api_utils import import_oligo_records, reassign_oligo, unassign_oligo
from oligos.forms import UNASSIGN
from oligos.views import assay_label


class AssayLabelTest(SimpleTestCase):

    def test_unassigned(self):
        self.assertEqual(assay_label(None, {1: 'A'}), 'None')

    def test_names_unavailable(self):
        self.assertEqual(assay_label(1, None), 'Unknown')

    def test_missing_id(self):
        self.assertEqual(assay_label(2, {1: 'A'}), 'Unknown')

    def test_known(self):
        self.assertEqual(assay_label(1, {1: 'A'}), 'A')


class ReassignCallsTest(SimpleTestCase):

    def test_unassign_always_sends_null(self):
        backend = mock.Mock()
        unassign_oligo(backend, 5)
        backend.rpc.assert_called_once_with('reassign_user_oligo', {'p_oligo_id': 5, 'p_assay_id': None})

    def test_reassign(self):
        backend = mock.Mock()
        reassign_oligo(backend, 5, 2)
        backend.rpc.assert_called_once_with('reassign_user_oligo', {'p_oligo_id': 5, 'p_assay_id': 2})


@override_settings(BULK_MAX_WORKERS=1)
class ImportOligoRecordsTest(SimpleTestCase):

    def test_tally(self):
        backend = mock.Mock()

        def rpc(function, params):
            if params['p_sequence_name'] == 'dup':
                raise BackendValidationError('Oligo name already exists', status_code=409)

        backend.rpc.side_effect = rpc
        records = [
            FastaRecord('ok1', 'acgt'),
            FastaRecord('bad', 'ACGZ'),
            FastaRecord('dup', 'ACGT'),
            FastaRecord('ok2', 'TT GG'),
        ]

        result = import_oligo_records(backend, records, assay_id=3)

        self.assertEqual(result.total, 4)
        self.assertEqual(result.success_count, 2)
        self.assertEqual(result.failure_count, 2)
        self.assertEqual([f.label for f in result.failures], ['bad', 'dup'])
        self.assertEqual(result.failures[1].message, 'Oligo name already exists')
        created = [c.args[1] for c in backend.rpc.call_args_list]
        self.assertEqual([p['p_dna_sequence'] for p in created], ['ACGT', 'ACGT', 'TTGG'])
        self.assertTrue(all(p['p_assay_id'] == 3 and p['p_panel_id'] is None for p in created))


class OligoListTest(BackendViewTestCase):

    def test_pagination_and_names(self):
        rows = [
            {'oligo_id': i, 'sequence_name': f'o{i}', 'dna_sequence': 'A' * 60, 'assay_id': 1 if i % 2 else None}
            for i in range(1, 31)
        ]
        self.set_rpc(fetch_user_oligos=rows)
        self.backend.select.return_value = [{'assay_id': 1, 'assay_name': 'Assay One'}]

        response = self.client.get(reverse('oligos:oligo_list'))

        page = response.context['oligo_list']
        self.assertEqual(len(page), 25)
        self.assertEqual(response.context['total_count'], 30)
        self.assertEqual(page[0]['assay_name'], 'Assay One')
        self.assertEqual(page[1]['assay_name'], 'None')
        self.assertContains(response, 'A' * 50 + '...')
        self.backend.select.assert_called_with('user_assays', 'assay_id,assay_name', order='assay_name.asc')

        second = self.client.get(reverse('oligos:oligo_list'), {'page': 2})
        self.assertEqual(len(second.context['oligo_list']), 5)

    def test_names_lookup_failure(self):
        self.set_rpc(fetch_user_oligos=[{'oligo_id': 1, 'sequence_name': 'x', 'dna_sequence': 'A', 'assay_id': 1}])
        self.backend.select.side_effect = BackendError('relation does not allow select', status_code=400)

        response = self.client.get(reverse('oligos:oligo_list'))

        self.assertEqual(response.context['oligo_list'][0]['assay_name'], 'Unknown')


class OligoCreateTest(BackendViewTestCase):

    def test_create(self):
        self.set_rpc(create_user_oligo={'oligo_id': 9})
        self.backend.select.return_value = [{'assay_id': 1, 'assay_name': 'Assay One'}]

        response = self.client.post(reverse('oligos:oligo_create'), {
            'sequence_name': ' FWD ',
            'dna_sequence': 'acg tn',
            'assay': '1',
        })

        self.assertRedirects(response, reverse('oligos:oligo_list'), fetch_redirect_response=False)
        self.assertEqual(self.rpc_calls('create_user_oligo'), [{
            'p_sequence_name': 'FWD',
            'p_dna_sequence': 'ACGTN',
            'p_assay_id': 1,
            'p_panel_id': None,
        }])

    def test_name_required(self):
        response = self.client.post(reverse('oligos:oligo_create'), {'sequence_name': ' ', 'dna_sequence': 'ACGT'})
        self.assertContains(response, 'Sequence name is required')


@override_settings(BULK_MAX_WORKERS=1)
class OligoReassignAndBulkTest(BackendViewTestCase):

    def setUp(self):
        super().setUp()
        self.backend.select.return_value = [{'assay_id': 2, 'assay_name': 'Target'}]

    def test_single_unassign(self):
        self.set_rpc(reassign_user_oligo={})
        self.client.post(reverse('oligos:oligo_reassign', args=[5]), {'target': UNASSIGN})
        self.assertEqual(self.rpc_calls('reassign_user_oligo'), [{'p_oligo_id': 5, 'p_assay_id': None}])

    def test_single_reassign(self):
        self.set_rpc(reassign_user_oligo={})
        self.client.post(reverse('oligos:oligo_reassign', args=[5]), {'target': '2'})
        self.assertEqual(self.rpc_calls('reassign_user_oligo'), [{'p_oligo_id': 5, 'p_assay_id': 2}])

    def test_empty_target_is_an_error(self):
        response = self.client.post(reverse('oligos:oligo_reassign', args=[5]), {'target': ''})
        self.assertIn('Please select a target assay or unassign', self.messages_of(response))
        self.assertEqual(self.rpc_calls('reassign_user_oligo'), [])

    def test_bulk_delete_reports_failures(self):
        def delete(params):
            if params['p_oligo_id'] == 2:
                raise NotFoundError('oligo_id 2 does not exist')

        self.set_rpc(delete_user_oligo=delete)

        response = self.client.post(reverse('oligos:oligo_bulk_action'), {
            'action': 'delete',
            'oligo_ids': ['1', '2', '3'],
        })

        messages = self.messages_of(response)
        self.assertIn('Deleted 2 oligo(s).', messages)
        self.assertIn('Oligo 2: oligo_id 2 does not exist', messages)
        self.assertEqual(len(self.rpc_calls('delete_user_oligo')), 3)

    def test_bulk_unassign(self):
        self.set_rpc(reassign_user_oligo={})

        self.client.post(reverse('oligos:oligo_bulk_action'), {
            'action': 'reassign',
            'target': UNASSIGN,
            'oligo_ids': ['1', '2'],
        })

        self.assertEqual(self.rpc_calls('reassign_user_oligo'), [
            {'p_oligo_id': 1, 'p_assay_id': None},
            {'p_oligo_id': 2, 'p_assay_id': None},
        ])

    def test_bulk_without_selection(self):
        response = self.client.post(reverse('oligos:oligo_bulk_action'), {'action': 'delete'})
        self.assertIn('Select at least one oligo.', self.messages_of(response))


@override_settings(BULK_MAX_WORKERS=1)
class OligoImportViewTest(BackendViewTestCase):

    def test_import_text(self):
        self.set_rpc(create_user_oligo={})

        response = self.client.post(reverse('oligos:oligo_import'), {
            'fasta_text': '>a\nACGT\n>b\nXXXX\n>c\nGGCC\n>empty\n',
            'assay': '',
        })

        result = response.context['result']
        self.assertEqual((result.total, result.success_count, result.failure_count), (3, 2, 1))
        self.assertContains(response, 'Sequence contains invalid characters.')

    def test_import_file(self):
        self.set_rpc(create_user_oligo={})
        upload = SimpleUploadedFile('oligos.fasta', b'>a\nACGT\n')

        response = self.client.post(reverse('oligos:oligo_import'), {'fasta_file': upload})

        self.assertEqual(response.context['result'].success_count, 1)

    def test_nothing_to_import(self):
        response = self.client.post(reverse('oligos:oligo_import'), {'fasta_text': '>only_header\n'})
        self.assertContains(response, 'No sequence found in FASTA input')
